from .room import Room, RoomType, RoomStatus, room_sort_key
from .guest import Guest, PaymentMode, to_money
from .expense import Expense
from .setting import Setting, ADMIN_PASSWORD_KEY
