import uuid

from hotel_booking.models import Room, RoomCategory


# Sample room data, prices in naira per night
ROOMS = [
    Room(
        id="room-1",
        name="Lagoon View Deluxe",
        category=RoomCategory.DELUXE,
        description="Spacious deluxe room overlooking the Lagos lagoon with a private balcony.",
        amenities=["King Bed", "Lagoon View", "Balcony", "WiFi", "Smart TV", "Mini Bar"],
        price=95000,
        max_guests=3,
        images=[
            "https://images.unsplash.com/photo-1590490360182-c33d57733427?w=800",
            "https://images.unsplash.com/photo-1582719478250-c89cae4dc85b?w=800",
        ],
        available=True,
    ),
    Room(
        id="room-2",
        name="Classic Single",
        category=RoomCategory.SINGLE,
        description="Comfortable single room ideal for business travellers on a short stay.",
        amenities=["Single Bed", "WiFi", "Work Desk", "Air Conditioning"],
        price=25000,
        max_guests=1,
        images=["https://images.unsplash.com/photo-1631049307264-da0ec9d70304?w=800"],
        available=True,
    ),
    Room(
        id="room-3",
        name="Executive Suite",
        category=RoomCategory.SUITE,
        description="Separate living area, dining space and a marble bathroom with a soaking tub.",
        amenities=["King Bed", "Living Room", "Bathtub", "WiFi", "Smart TV", "Room Service"],
        price=150000,
        max_guests=4,
        images=[
            "https://images.unsplash.com/photo-1578683010236-d716f9a3f461?w=800",
            "https://images.unsplash.com/photo-1566665797739-1674de7a421a?w=800",
        ],
        available=True,
    ),
    Room(
        id="room-4",
        name="Standard Double",
        category=RoomCategory.DOUBLE,
        description="Bright double room with garden views, perfect for couples.",
        amenities=["Queen Bed", "Garden View", "WiFi", "Air Conditioning", "Breakfast"],
        price=45000,
        max_guests=2,
        images=["https://images.unsplash.com/photo-1611892440504-42a792e24d32?w=800"],
        available=True,
    ),
    Room(
        id="room-5",
        name="Family Double",
        category=RoomCategory.DOUBLE,
        description="Two double beds and extra space for families travelling together.",
        amenities=["Two Double Beds", "WiFi", "Smart TV", "Breakfast"],
        price=60000,
        max_guests=4,
        images=["https://images.unsplash.com/photo-1618773928121-c32242e63f39?w=800"],
        available=False,
    ),
    Room(
        id="room-6",
        name="Presidential Suite",
        category=RoomCategory.SUITE,
        description="Top-floor suite with panoramic city views, butler service and a private lounge.",
        amenities=["King Bed", "City View", "Private Lounge", "Butler", "Jacuzzi", "WiFi"],
        price=350000,
        max_guests=4,
        images=["https://images.unsplash.com/photo-1596394516093-501ba68a0ba6?w=800"],
        available=True,
    ),
]


def get_seed_rooms():
    """Get fresh copies of the sample rooms."""
    return [room.model_copy(deep=True) for room in ROOMS]


def generate_room_id():
    """Generate a unique room ID."""
    return f"room-{uuid.uuid4().hex[:12]}"


def generate_booking_id():
    """Generate a unique booking ID."""
    return f"BK-{uuid.uuid4().hex[:12].upper()}"
