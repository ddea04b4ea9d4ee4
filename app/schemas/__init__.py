from app.schemas.auth import Token, UserCreate, UserLogin, UserResponse, UserProfileUpdate, RoommateMatch
from app.schemas.reservation import ReservationCreate, ReservationStatusUpdate, ReservationResponse, ReservationSummary
from app.schemas.house import HouseCreate, HouseUpdate, HouseResponse, ReviewCreate, ReviewResponse, HouseStudent
from app.schemas.audit_log import AuditLogResponse
