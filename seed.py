"""Sample marketplace data the store starts with."""

from typing import Optional

from store import DomainStore

SAMPLE_USERS = [
    {
        "id": "farmer1",
        "name": "John Farmer",
        "phone": "+919876543210",
        "role": "farmer",
        "location": "Guntur, AP",
        "walletBalance": 25000,
        "bio": "Tomato and chilli grower, third generation.",
    },
    {
        "id": "farmer2",
        "name": "Lakshmi Devi",
        "phone": "+919812345670",
        "role": "farmer",
        "location": "Krishna, AP",
        "walletBalance": 40000,
    },
    {
        "id": "distributor1",
        "name": "Coastal Agro Traders",
        "phone": "+919900112233",
        "role": "distributor",
        "location": "Vijayawada, AP",
        "walletBalance": 500000,
    },
    {
        "id": "agent1",
        "name": "Suresh Reddy",
        "phone": "+919988776655",
        "role": "agent",
        "location": "Guntur, AP",
        "walletBalance": 8000,
    },
]

SAMPLE_CROPS = [
    {
        "id": "1",
        "farmerId": "farmer1",
        "cropName": "Tomato",
        "location": "Guntur, AP",
        "area": 2.5,
        "seedDate": "2024-03-15",
        "expectedHarvest": "2024-06-15",
        "status": "growing",
        "price": 45000,
        "images": ["https://images.unsplash.com/photo-1618160702438-9b02ab6515c9?w=400"],
        "agentNotes": ["Crop looking healthy", "Good soil moisture"],
    },
    {
        "id": "2",
        "farmerId": "farmer2",
        "cropName": "Rice",
        "location": "Krishna, AP",
        "area": 5.0,
        "seedDate": "2024-02-20",
        "expectedHarvest": "2024-07-20",
        "status": "verified",
        "price": 125000,
        "images": ["https://images.unsplash.com/photo-1618160702438-9b02ab6515c9?w=400"],
        "agentNotes": ["Excellent variety", "Ready for investment"],
    },
]

SAMPLE_CONTRACTS = [
    {
        "id": "1",
        "cropId": "1",
        "farmerId": "farmer1",
        "distributorId": "distributor1",
        "price": 45000,
        "status": "active",
        "terms": "Standard purchase agreement with quality guarantee",
        "milestones": [
            {"id": "1", "title": "Advance Payment", "amount": 15000, "status": "completed", "date": "2024-03-20"},
            {"id": "2", "title": "Mid-stage Payment", "amount": 15000, "status": "pending"},
            {"id": "3", "title": "Final Payment", "amount": 15000, "status": "pending"},
        ],
        "createdAt": "2024-03-20",
    },
]

SAMPLE_TASKS = [
    {
        "id": "1",
        "cropId": "2",
        "agentId": "agent1",
        "farmerId": "farmer2",
        "status": "pending",
        "priority": "high",
        "notes": "Initial verification required",
        "photos": [],
        "location": "Krishna, AP",
        "scheduledDate": "2024-05-29",
    },
]


def seed_store(store: DomainStore) -> DomainStore:
    store.load(
        users=SAMPLE_USERS,
        crops=SAMPLE_CROPS,
        contracts=SAMPLE_CONTRACTS,
        tasks=SAMPLE_TASKS,
    )
    return store


def sample_store(strict_transitions: Optional[bool] = None) -> DomainStore:
    return seed_store(DomainStore(strict_transitions=strict_transitions))
