"""
Catalogue local fixe: utilisé quand la boutique tourne sans Supabase
(développement, démonstration) via MEDICINE_DATA_SOURCE=local.
"""
from typing import Any, Dict, List

LOCAL_CATEGORIES: List[Dict[str, str]] = [
    {"id": "otc", "name": "Over the Counter", "description": "Medicines available without prescription"},
    {"id": "prescription", "name": "Prescription", "description": "Medicines that require a valid prescription"},
    {"id": "vitamins", "name": "Vitamins & Supplements", "description": "Daily vitamins and dietary supplements"},
    {"id": "personal-care", "name": "Personal Care", "description": "Skin care, oral care and hygiene"},
]

LOCAL_MEDICINES: List[Dict[str, Any]] = [
    {
        "id": "local-1",
        "name": "Paracetamol 500mg",
        "description": "Pain reliever and fever reducer for headaches, muscle aches, colds and fevers.",
        "category": "otc",
        "price": 8.99,
        "manufacturer": "Generic Pharma",
        "dosage": "500mg tablets - Take 1-2 tablets every 4-6 hours as needed",
        "prescription_required": False,
        "image_url": "https://images.unsplash.com/photo-1584308666744-24d5c474f2ae?w=800&q=80",
        "stock_available": True,
        "rating": 4.5,
        "reviews_count": 234,
    },
    {
        "id": "local-2",
        "name": "Ibuprofen 400mg",
        "description": "Nonsteroidal anti-inflammatory drug used to reduce fever and treat pain or inflammation.",
        "category": "otc",
        "price": 12.99,
        "manufacturer": "HealthCare Plus",
        "dosage": "400mg tablets - Take 1 tablet every 6-8 hours with food",
        "prescription_required": False,
        "image_url": "https://images.unsplash.com/photo-1471864190281-a93a3070b6de?w=800&q=80",
        "stock_available": True,
        "rating": 4.7,
        "reviews_count": 456,
    },
    {
        "id": "local-3",
        "name": "Aspirin 100mg",
        "description": "Low-dose aspirin used to prevent heart attacks and strokes in at-risk patients.",
        "category": "prescription",
        "price": 6.49,
        "manufacturer": "CardioMed",
        "dosage": "100mg tablets - 1 tablet daily with food",
        "prescription_required": True,
        "image_url": "https://images.unsplash.com/photo-1587854692152-cbe660dbde88?w=800&q=80",
        "stock_available": True,
        "rating": 4.6,
        "reviews_count": 312,
    },
    {
        "id": "local-4",
        "name": "Amoxicillin 500mg",
        "description": "Penicillin antibiotic for bacterial infections of the ear, nose, throat and urinary tract.",
        "category": "prescription",
        "price": 18.75,
        "manufacturer": "MediPharm",
        "dosage": "500mg capsules - 1 capsule every 8 hours for 7 days",
        "prescription_required": True,
        "image_url": "https://images.unsplash.com/photo-1550572017-edd951b55104?w=800&q=80",
        "stock_available": True,
        "rating": 4.4,
        "reviews_count": 189,
    },
    {
        "id": "local-5",
        "name": "Vitamin D3 1000 IU",
        "description": "Supports bone health, immune function and calcium absorption.",
        "category": "vitamins",
        "price": 15.99,
        "manufacturer": "NutriLife",
        "dosage": "1 softgel daily with a meal",
        "prescription_required": False,
        "image_url": "https://images.unsplash.com/photo-1607619056574-7b8d3ee536b2?w=800&q=80",
        "stock_available": True,
        "rating": 4.8,
        "reviews_count": 871,
    },
    {
        "id": "local-6",
        "name": "Vitamin C 1000mg",
        "description": "Antioxidant supplement supporting the immune system.",
        "category": "vitamins",
        "price": 11.49,
        "manufacturer": "NutriLife",
        "dosage": "1 tablet daily",
        "prescription_required": False,
        "image_url": "https://images.unsplash.com/photo-1616671276441-2f2c277b8bf6?w=800&q=80",
        "stock_available": True,
        "rating": 4.6,
        "reviews_count": 540,
    },
    {
        "id": "local-7",
        "name": "Cetirizine 10mg",
        "description": "Antihistamine for hay fever, allergic rhinitis and hives.",
        "category": "otc",
        "price": 9.25,
        "manufacturer": "AllerCare",
        "dosage": "10mg tablet once daily",
        "prescription_required": False,
        "image_url": "https://images.unsplash.com/photo-1585435557343-3b092031a831?w=800&q=80",
        "stock_available": False,
        "rating": 4.3,
        "reviews_count": 205,
    },
    {
        "id": "local-8",
        "name": "Fluoride Toothpaste",
        "description": "Cavity protection toothpaste with fluoride for daily oral care.",
        "category": "personal-care",
        "price": 4.99,
        "manufacturer": "DentaPro",
        "dosage": "Brush twice daily",
        "prescription_required": False,
        "image_url": "https://images.unsplash.com/photo-1559591937-abc2b8a2b2f4?w=800&q=80",
        "stock_available": True,
        "rating": 4.2,
        "reviews_count": 98,
    },
]
