from .capacity import ClassCapacity, load_capacity
from .clock import Clock, FrozenClock, SystemClock, as_utc
from .promotion import promote_next
from .reservation_service import ReservationService, reservation_service
from .sweeper import sweep_class
from .waitlist import next_position, renumber, waitlist_head
