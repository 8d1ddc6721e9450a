"""
Simple simulator: list a crop, have an agent verify it, then contract it.
Run (with the API up on localhost:8000):
    python scripts/simulate_verification.py
"""
import os
import requests

API = os.getenv("API_URL", "http://localhost:8000")

def main():
    r = requests.post(f"{API}/api/crops", json={
        "farmerId": "farmer1",
        "cropName": "Chilli",
        "location": "Guntur, AP",
        "area": 1.5,
        "seedDate": "2024-07-01",
        "expectedHarvest": "2024-11-15",
        "price": 60000,
        "images": [],
    })
    print("crop:", r.status_code, r.text)
    r.raise_for_status()
    crop_id = r.json()["id"]

    r = requests.post(f"{API}/api/tasks", json={
        "cropId": crop_id,
        "agentId": "agent1",
        "farmerId": "farmer1",
        "priority": "high",
        "notes": "Field visit before listing",
        "location": "Guntur, AP",
        "scheduledDate": "2024-07-10",
    })
    print("task:", r.status_code, r.text)
    task_id = r.json()["id"]

    r = requests.post(f"{API}/api/verifications", json={
        "cropId": crop_id,
        "taskId": task_id,
        "decision": "approve",
        "notes": "Healthy seedlings, drip irrigation in place",
    })
    print("verification:", r.status_code, r.text)

    r = requests.post(f"{API}/api/contracts", json={
        "cropId": crop_id,
        "farmerId": "farmer1",
        "distributorId": "distributor1",
        "price": 60000,
        "status": "active",
        "terms": "Purchase at harvest, grade A only",
        "milestones": [
            {"id": "1", "title": "Advance Payment", "amount": 20000},
            {"id": "2", "title": "Final Payment", "amount": 40000},
        ],
    })
    print("contract:", r.status_code, r.text)

    rr = requests.get(f"{API}/api/history/verify")
    print("history:", rr.status_code, rr.text)

if __name__ == "__main__":
    main()
