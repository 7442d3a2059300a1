"""
Demo tenant used to seed the memory backend
"""

from qrmenu.models.business import Business, SliderItem, WorkingHours
from qrmenu.models.category import Category
from qrmenu.models.product import Product, ProductExtra, ProductVariation
from qrmenu.models.snapshot import TenantSnapshot

DEMO_SLUG = "antigravity-kitchen"

DEFAULT_TAGS = [
    "Yeni", "İndirimli", "Vegan", "Acılı", "Şefin Spesiyali", "Glutensiz",
    "Popüler", "Çocuk Menüsü", "Organik", "Ev Yapımı", "Hafif",
]


def demo_snapshot() -> TenantSnapshot:
    """Fresh copy of the demo tenant"""
    business = Business(
        id="1",
        slug=DEMO_SLUG,
        name="Antigravity Kitchen",
        slogan="Lezzetin Yerçekimsiz Hali",
        logo="/images/logo.png",
        cover_image="/images/cover.jpg",
        cuisine_types=["Fine Dining", "Modern Türk", "Fusion"],
        rating=4.9,
        review_count=847,
        address="Bağdat Caddesi No: 123, Kadıköy, İstanbul",
        phone="+90 216 555 0123",
        email="info@antigravitykitchen.com",
        website="www.antigravitykitchen.com",
        description=(
            "Antigravity Kitchen, modern Türk mutfağını dünya lezzetleriyle "
            "harmanlayan, premium fine dining deneyimi sunan bir restorandır."
        ),
        social_media={
            "instagram": "antigravitykitchen",
            "facebook": "antigravitykitchen",
            "twitter": "antigravity_k",
            "youtube": "antigravitykitchen",
            "tiktok": "antigravitykitchen",
        },
        gallery=[
            "https://images.unsplash.com/photo-1517248135467-4c7edcad34c4?w=800&h=600&fit=crop",
            "https://images.unsplash.com/photo-1414235077428-338989a2e8c0?w=800&h=600&fit=crop",
        ],
        working_hours=[
            WorkingHours(day="Pazartesi", open="11:00", close="23:00"),
            WorkingHours(day="Salı", open="11:00", close="23:00"),
            WorkingHours(day="Çarşamba", open="11:00", close="23:00"),
            WorkingHours(day="Perşembe", open="11:00", close="23:00"),
            WorkingHours(day="Cuma", open="11:00", close="00:00"),
            WorkingHours(day="Cumartesi", open="10:00", close="00:00"),
            WorkingHours(day="Pazar", open="10:00", close="22:00"),
        ],
        slider_items=[
            SliderItem(
                id="1",
                title="Şefin Özel Menüsü",
                subtitle="Taze malzemeler ve özenle hazırlanan lezzetler ile unutulmaz bir gastronomi deneyimi yaşayın.",
                image="https://images.unsplash.com/photo-1504674900247-0877df9cc836?w=800&h=600&fit=crop",
            ),
        ],
    )

    categories = [
        Category(id="1", name="Ana Yemekler", icon="UtensilsCrossed", product_count=3),
        Category(id="2", name="İçecekler", icon="Coffee", product_count=2),
    ]

    products = [
        Product(
            id="p1",
            category_id="1",
            name="Signature Burger",
            description="200gr dana köfte, aged cheddar, truffle mayo. Patates kızartması ile servis edilir.",
            price=275,
            original_price=350,
            image="https://images.unsplash.com/photo-1568901346375-23c9450c58cd?w=800&h=600&fit=crop",
            is_featured=True,
            is_new=True,
            tags=["Bestseller"],
            variations=[
                ProductVariation(id="single", name="Tek Köfte", price_modifier=0),
                ProductVariation(id="double", name="Çift Köfte", price_modifier=75),
            ],
            extras=[
                ProductExtra(id="bacon", name="Ekstra Bacon", price=25),
                ProductExtra(id="cheese", name="Ekstra Peynir", price=15),
            ],
            allergens=["Gluten", "Süt"],
            preparation_time="15-20 dk",
            calories=890,
        ),
        Product(
            id="p2",
            category_id="2",
            name="Taze Limonata",
            description="Ev yapımı limonata, taze nane ve zencefil ile.",
            price=55,
            image="https://images.unsplash.com/photo-1621263764928-df1444c5e859?w=800&h=600&fit=crop",
            tags=["Refreshing"],
            variations=[
                ProductVariation(id="small", name="Small (250ml)", price_modifier=0),
                ProductVariation(id="large", name="Large (500ml)", price_modifier=25),
            ],
            preparation_time="3-5 dk",
            calories=85,
        ),
        Product(
            id="p3",
            category_id="1",
            name="Steak Klasik",
            description="300gr dana bonfile, patates püresi ve mevsim sebzeleri ile",
            price=320,
            original_price=420,
            image="https://images.unsplash.com/photo-1600891964092-4316c288032e?w=800&h=600&fit=crop",
            is_featured=True,
            tags=["Premium"],
            preparation_time="25-30 dk",
            calories=650,
        ),
        Product(
            id="p4",
            category_id="2",
            name="Mango Smoothie",
            description="Taze mango, muz ve portakal suyu ile hazırlanır",
            price=65,
            original_price=85,
            image="https://images.unsplash.com/photo-1623065422902-30a2d299bbe4?w=800&h=600&fit=crop",
            is_new=True,
            tags=["Vegan"],
            preparation_time="5 dk",
            calories=180,
        ),
        Product(
            id="p5",
            category_id="1",
            name="Caesar Salad",
            description="Izgara tavuk, romaine marul, parmesan ve caesar sos",
            price=145,
            original_price=185,
            image="https://images.unsplash.com/photo-1546793665-c74683f339c1?w=800&h=600&fit=crop",
            tags=["Healthy"],
            allergens=["Süt", "Gluten"],
            preparation_time="10-15 dk",
            calories=380,
        ),
    ]

    return TenantSnapshot(
        business=business,
        categories=categories,
        products=products,
        tags=list(DEFAULT_TAGS),
    )
