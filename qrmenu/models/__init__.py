from qrmenu.models.business import Business, WorkingHours, SliderItem, WelcomeSettings
from qrmenu.models.category import Category, CategoryCreate, CategoryUpdate
from qrmenu.models.product import Product, ProductCreate, ProductVariation, ProductExtra
from qrmenu.models.feedback import Feedback, FeedbackCreate, FeedbackScores
from qrmenu.models.snapshot import TenantSnapshot, MenuStats
from qrmenu.models.records import BusinessRecord, CategoryRecord, ProductRecord, TagRecord
