"""
Database seeding for the RCB Marketplace.
Creates the initial contractor directory if the store is empty.
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_CONTRACTORS = [
    {
        'name': 'Sharma Construction',
        'description': 'Specializing in full home renovations with over 15 years of experience. Licensed and insured.',
        'specialty': 'General',
        'profileImage': 'https://images.unsplash.com/photo-1560250097-0b93528c311a?auto=format&fit=crop&w=256&h=256&q=80',
        'email': 'info@sharmaconstruction.com',
        'phone': '+91 98765 43210',
        'specialties': ['Kitchen', 'Bathroom', 'Vastu Compliant'],
        'location': 'Delhi, India',
        'latitude': 28.6139,
        'longitude': 77.2090,
    },
    {
        'name': 'Luxury Kitchen Designs',
        'description': 'Luxury kitchen renovations and custom cabinetry. Award-winning designs and certified installers.',
        'specialty': 'Specialist',
        'profileImage': 'https://images.unsplash.com/photo-1573496359142-b8d87734a5a2?auto=format&fit=crop&w=256&h=256&q=80',
        'email': 'design@luxurykitchens.co.in',
        'phone': '+91 87654 32109',
        'specialties': ['Modular Kitchens', 'Cabinets', 'Granite Countertops'],
        'location': 'Mumbai, India',
        'latitude': 19.0760,
        'longitude': 72.8777,
    },
    {
        'name': 'Modern Bath Solutions',
        'description': 'Complete bathroom remodeling services. Specializing in accessible designs and quick turnarounds.',
        'specialty': 'Specialist',
        'profileImage': 'https://images.unsplash.com/photo-1566492031773-4f4e44671857?auto=format&fit=crop&w=256&h=256&q=80',
        'email': 'info@modernbath.co.in',
        'phone': '+91 76543 21098',
        'specialties': ['Bathrooms', 'Jacuzzi', 'Accessible'],
        'location': 'Bangalore, India',
        'latitude': 12.9716,
        'longitude': 77.5946,
    },
    {
        'name': 'Patel Home Builders',
        'description': 'Custom home construction and major renovations with attention to detail and quality craftsmanship.',
        'specialty': 'General',
        'profileImage': 'https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?auto=format&fit=crop&w=256&h=256&q=80',
        'email': 'build@patelhomes.in',
        'phone': '+91 65432 10987',
        'specialties': ['New Construction', 'Bungalows', 'Duplex Homes'],
        'location': 'Ahmedabad, India',
        'latitude': 23.0225,
        'longitude': 72.5714,
    },
    {
        'name': 'Eco-Friendly Renovations',
        'description': 'Sustainable and environmentally conscious renovation services using recycled materials and energy-efficient designs.',
        'specialty': 'Specialist',
        'profileImage': 'https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?auto=format&fit=crop&w=256&h=256&q=80',
        'email': 'green@ecofriendly.co.in',
        'phone': '+91 54321 09876',
        'specialties': ['Solar Integration', 'Energy Efficiency', 'Sustainable Materials'],
        'location': 'Pune, India',
        'latitude': 18.5204,
        'longitude': 73.8567,
    },
    {
        'name': 'Mehta Electrical Services',
        'description': 'Professional electrical contractors for residential and commercial projects. Full-service from wiring to smart home installations.',
        'specialty': 'Electrical',
        'profileImage': 'https://images.unsplash.com/photo-1519085360753-af0119f7cbe7?auto=format&fit=crop&w=256&h=256&q=80',
        'email': 'service@mehtaelectrical.in',
        'phone': '+91 43210 98765',
        'specialties': ['Electrical', 'Lighting', 'Smart Home'],
        'location': 'Chennai, India',
        'latitude': 13.0827,
        'longitude': 80.2707,
    },
]


def seed_contractors(storage, contractors=None):
    """
    Create the default contractor directory if no contractors exist.

    Args:
        storage: Storage contract implementation
        contractors: Optional list of contractor payloads (defaults to DEFAULT_CONTRACTORS)

    Returns:
        Number of contractors created
    """
    created = storage.seed_contractors(contractors or DEFAULT_CONTRACTORS)
    if created:
        logger.info(f"Seeded {created} contractors")
    else:
        logger.info("Contractors already present, skipping seed")
    return created
