from datetime import date, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"


Difficulty = Literal["Easy", "Moderate", "Difficult", "Expert"]


class ItineraryDay(BaseModel):
    day: int = Field(ge=1)
    title: str
    description: str = ""
    activities: list[str] = Field(default_factory=list)


class PackageItem(BaseModel):
    id: str
    title: str
    description: str = ""
    location: str
    duration: int
    difficulty: Difficulty
    price: float
    max_group_size: int
    images: list[str] = Field(default_factory=list)
    itinerary: list[ItineraryDay] = Field(default_factory=list)
    included: list[str] = Field(default_factory=list)
    excluded: list[str] = Field(default_factory=list)
    rating: float | None = None
    total_reviews: int | None = None
    is_active: bool = True
    created_at: datetime | None = None


class PackageListResponse(BaseModel):
    items: list[PackageItem]
    count: int
    total: int


class AvailableDatesResponse(BaseModel):
    package_id: str
    dates: list[date]
    count: int


class AvailabilityItem(BaseModel):
    id: str
    package_id: str
    available_date: date
    max_bookings: int
    current_bookings: int
    is_available: bool
    remaining: int = 0
    created_at: datetime | None = None


class AvailabilityListResponse(BaseModel):
    package_id: str
    items: list[AvailabilityItem]
    count: int


class AvailabilityCreateRequest(BaseModel):
    available_date: date
    max_bookings: int = Field(default=1, ge=1)


class AvailabilityUpdateRequest(BaseModel):
    max_bookings: int | None = Field(default=None, ge=1)
    is_available: bool | None = None


class AvailabilityWriteResponse(BaseModel):
    ok: bool = True
    availability: AvailabilityItem


class AvailabilityDeleteResponse(BaseModel):
    ok: bool = True
    availability_id: str


class DateBookingResponse(BaseModel):
    ok: bool = True
    package_id: str
    available_date: date
    availability: AvailabilityItem | None = None


class BookingPackageSummary(BaseModel):
    id: str | None = None
    title: str | None = None
    location: str | None = None
    duration: int | None = None
    difficulty: str | None = None
    price: float | None = None
    images: list[str] | None = None


class BookingCustomerSummary(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class BookingItem(BaseModel):
    id: str
    user_id: str
    package_id: str
    start_date: date
    group_size: int
    total_amount: float
    status: BookingStatus
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_id: str | None = None
    special_requests: str | None = None
    booking_reference: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    package: BookingPackageSummary | None = None
    customer: BookingCustomerSummary | None = None


class BookingListResponse(BaseModel):
    items: list[BookingItem]
    count: int
    limit: int
    offset: int
    has_more: bool


class MyBookingsResponse(BaseModel):
    items: list[BookingItem]
    count: int


class BookingCreateRequest(BaseModel):
    package_id: str
    start_date: date
    group_size: int = Field(default=1, ge=1)
    special_requests: str | None = Field(default=None, max_length=1000)


class BookingStatusUpdateRequest(BaseModel):
    status: BookingStatus
    notify: bool = True


class NotificationResult(BaseModel):
    whatsapp: bool | None = None
    email: bool | None = None
    error: str | None = None


class BookingStatusUpdateResponse(BaseModel):
    ok: bool = True
    booking: BookingItem
    notifications: NotificationResult | None = None


class CancelBookingResponse(BaseModel):
    ok: bool = True
    booking_id: str
    status: Literal["cancelled"] = "cancelled"


class DemoPaymentRequest(BaseModel):
    payment_id: str | None = Field(default=None, max_length=120)


class DemoPaymentResponse(BaseModel):
    ok: bool = True
    booking: BookingItem


class ReviewerSummary(BaseModel):
    name: str | None = None
    avatar_url: str | None = None


class ReviewItem(BaseModel):
    id: str
    user_id: str
    package_id: str
    booking_id: str
    rating: int = Field(ge=1, le=5)
    comment: str
    created_at: datetime | None = None
    reviewer: ReviewerSummary | None = None


class ReviewListResponse(BaseModel):
    items: list[ReviewItem]
    count: int


class ReviewCreateRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1, max_length=2000)


class ReviewUpdateRequest(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=1, max_length=2000)


class WishlistPackageSummary(BaseModel):
    title: str | None = None
    location: str | None = None
    duration: int | None = None
    difficulty: str | None = None
    price: float | None = None
    images: list[str] | None = None
    rating: float | None = None
    total_reviews: int | None = None


class WishlistItem(BaseModel):
    id: str
    user_id: str
    package_id: str
    created_at: datetime | None = None
    package: WishlistPackageSummary | None = None


class WishlistResponse(BaseModel):
    items: list[WishlistItem]
    count: int


class WishlistAddRequest(BaseModel):
    package_id: str


class WishlistStatusResponse(BaseModel):
    package_id: str
    in_wishlist: bool


class ProfileItem(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    date_of_birth: date | None = None
    emergency_contact: str | None = None
    preferences: dict | None = None
    is_admin: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProfileUpdateRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    bio: str | None = Field(default=None, max_length=2000)
    date_of_birth: date | None = None
    emergency_contact: str | None = None
    preferences: dict | None = None


class ActivityItem(BaseModel):
    id: str
    user_id: str
    activity_type: str
    activity_description: str | None = None
    metadata: dict | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None


class ActivityListResponse(BaseModel):
    items: list[ActivityItem]
    count: int


class BookingStats(BaseModel):
    total_bookings: int = 0
    confirmed_bookings: int = 0
    completed_bookings: int = 0
    pending_bookings: int = 0
    total_spent: float = 0
    last_booking_date: datetime | None = None


class ActivityStats(BaseModel):
    total_activities: int = 0
    last_activity: datetime | None = None
    registration_date: datetime | None = None


class UserDashboardResponse(BaseModel):
    profile: ProfileItem
    booking_stats: BookingStats
    activity_stats: ActivityStats
    recent_activity: list[ActivityItem] = Field(default_factory=list)


class AdminStatsResponse(BaseModel):
    totalBookings: int = 0
    totalRevenue: float = 0
    totalPackages: int = 0
    totalUsers: int = 0
    monthlyBookings: int = 0
    pendingBookings: int = 0


class AdminPackageListResponse(BaseModel):
    items: list[PackageItem]
    count: int


class PackageCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    location: str = Field(min_length=1)
    duration: int = Field(ge=1)
    difficulty: Difficulty
    price: float = Field(ge=0)
    max_group_size: int = Field(ge=1)
    images: list[str] = Field(default_factory=list)
    itinerary: list[ItineraryDay] = Field(default_factory=list)
    included: list[str] = Field(default_factory=list)
    excluded: list[str] = Field(default_factory=list)
    is_active: bool = True


class PackageUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    location: str | None = Field(default=None, min_length=1)
    duration: int | None = Field(default=None, ge=1)
    difficulty: Difficulty | None = None
    price: float | None = Field(default=None, ge=0)
    max_group_size: int | None = Field(default=None, ge=1)
    images: list[str] | None = None
    itinerary: list[ItineraryDay] | None = None
    included: list[str] | None = None
    excluded: list[str] | None = None
    is_active: bool | None = None


class PackageStatusUpdateRequest(BaseModel):
    is_active: bool


class PackageWriteResponse(BaseModel):
    ok: bool = True
    package: PackageItem


class PackageDeleteResponse(BaseModel):
    ok: bool = True
    package_id: str


class MessageTemplateItem(BaseModel):
    id: str
    type: Literal["email", "whatsapp"]
    name: str
    subject: str | None = None
    content: str
    variables: list[str] = Field(default_factory=list)
    is_active: bool = True


class MessageTemplateListResponse(BaseModel):
    items: list[MessageTemplateItem]
    count: int


class MessageLogItem(BaseModel):
    id: str
    booking_id: str | None = None
    type: Literal["email", "whatsapp"]
    recipient: str
    subject: str | None = None
    content: str
    status: Literal["sent", "failed", "delivered"]
    error_message: str | None = None
    sent_at: datetime | None = None
    delivered_at: datetime | None = None


class MessageLogListResponse(BaseModel):
    booking_id: str
    items: list[MessageLogItem]
    count: int


class MessageRetryResponse(BaseModel):
    ok: bool = True
    message_log_id: str
    sent: bool
