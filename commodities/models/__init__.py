from commodities.models.user import User
from commodities.models.product import Product
from commodities.models.session import UserSession
from commodities.models.activity_log import ActivityLog
