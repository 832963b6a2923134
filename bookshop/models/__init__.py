from bookshop.models.user import User, UserRole
from bookshop.models.review import Review
from bookshop.models.book import Book
from bookshop.models.award import Award, BookAward
from bookshop.models.cart import CartItem
from bookshop.models.bookmark import Bookmark
from bookshop.models.order_item import OrderItem
from bookshop.models.order import Order
from bookshop.models.order_event import OrderEventLog
from bookshop.models.announcement import Announcement
from bookshop.models.notifications import Notification

# add ALL models here
