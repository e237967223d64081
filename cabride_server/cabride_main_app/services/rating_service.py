"""Rating service - mutual rider/driver ratings on completed bookings"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth.models import User
from django.db import transaction
from django.utils import timezone

from ..models import Booking, Driver, Profile, RatingRecord
from ..utils.constants import BookingStatus, BusinessRules
from ..utils.errors import service_result, Conflict, Forbidden, NotFound, ValidationFailed
from ..utils.identity import is_admin, get_driver_for_user
from ..utils.lookups import parse_id
from .booking_service import load_booking
from .notification_service import NotificationService, driver_room, user_room

logger = logging.getLogger(__name__)


def validate_rating(rating):
    if isinstance(rating, bool):
        raise ValidationFailed('Rating must be an integer between 1 and 5')
    try:
        value = int(rating)
    except (TypeError, ValueError):
        raise ValidationFailed('Rating must be an integer between 1 and 5')
    if value != rating and str(value) != str(rating).strip():
        raise ValidationFailed('Rating must be an integer between 1 and 5')
    if not BusinessRules.MIN_RATING <= value <= BusinessRules.MAX_RATING:
        raise ValidationFailed('Rating must be between 1 and 5')
    return value


def running_average(old_average, old_count, new_rating):
    """(old_average * old_count + new_rating) / (old_count + 1), to 2 places"""
    total = Decimal(old_average or 0) * old_count + new_rating
    return (total / (old_count + 1)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _record_dict(record):
    return {
        'booking_number': record.booking.booking_number,
        'rating': record.rating,
        'comment': record.comment,
        'created_at': record.created_at,
    }


class RatingService:
    """
    Ratings are stored once per booking and side: Booking.user_rating holds
    the rider's rating of the driver, Booking.driver_rating the driver's
    rating of the rider.

    The running average divides by total_ratings, which only this service
    increments; trip completion counts total_rides separately.
    """

    def __init__(self, notifications=None):
        self.notifications = notifications or NotificationService()

    def _store(self, booking, field, rating, comment):
        entry = {'rating': rating, 'comment': comment or '', 'created_at': timezone.now().isoformat()}
        updated = Booking.objects.filter(pk=booking.pk, **{f'{field}__isnull': True}).update(
            **{field: entry, 'updated_at': timezone.now()}
        )
        if not updated:
            raise Conflict('This booking has already been rated', current_status=booking.status)
        setattr(booking, field, entry)
        return entry

    @service_result
    def rate_driver(self, actor, booking_id, driver_id, rating, comment=''):
        """Rider rates the driver of their completed booking"""
        rating = validate_rating(rating)
        driver_id = parse_id(driver_id, 'driver id')

        with transaction.atomic():
            booking = load_booking(booking_id, for_update=True)
            if booking.user_id != actor.id:
                raise Forbidden('Only the rider of this booking can rate its driver')
            if booking.status != BookingStatus.COMPLETED:
                raise Conflict('Only completed rides can be rated', current_status=booking.status)
            if booking.driver_id != driver_id:
                raise ValidationFailed('Driver does not match this booking')
            if booking.user_rating is not None:
                raise Conflict('This booking has already been rated', current_status=booking.status)

            entry = self._store(booking, 'user_rating', rating, comment)

            driver = Driver.objects.select_for_update().get(pk=driver_id)
            driver.ratings = running_average(driver.ratings, driver.total_ratings, rating)
            driver.total_ratings += 1
            driver.save(update_fields=['ratings', 'total_ratings', 'updated_at'])

            RatingRecord.objects.create(
                booking=booking, rater_role='user', driver=driver, user=actor,
                rating=rating, comment=comment or '',
            )

        logger.info(f'[RATING] Driver {driver.id} rated {rating} on {booking.booking_number}, average {driver.ratings}')
        self.notifications.rating_submitted(booking, driver_room(driver.id), entry)
        return {'booking': booking, 'rating': entry, 'average': driver.ratings, 'total_ratings': driver.total_ratings}

    @service_result
    def rate_rider(self, actor, booking_id, user_id, rating, comment=''):
        """Driver rates the rider of a completed booking they drove"""
        rating = validate_rating(rating)
        user_id = parse_id(user_id, 'user id')

        with transaction.atomic():
            booking = load_booking(booking_id, for_update=True)
            driver = get_driver_for_user(actor)
            if driver is None or booking.driver_id != driver.pk:
                raise Forbidden('Only the assigned driver can rate this rider')
            if booking.status != BookingStatus.COMPLETED:
                raise Conflict('Only completed rides can be rated', current_status=booking.status)
            if booking.user_id != user_id:
                raise ValidationFailed('User does not match this booking')
            if booking.driver_rating is not None:
                raise Conflict('This booking has already been rated', current_status=booking.status)

            entry = self._store(booking, 'driver_rating', rating, comment)

            Profile.objects.get_or_create(user_id=user_id)
            profile = Profile.objects.select_for_update().get(user_id=user_id)
            profile.ratings = running_average(profile.ratings, profile.total_ratings, rating)
            profile.total_ratings += 1
            profile.save(update_fields=['ratings', 'total_ratings', 'updated_at'])

            RatingRecord.objects.create(
                booking=booking, rater_role='driver', driver=driver, user_id=user_id,
                rating=rating, comment=comment or '',
            )

        logger.info(f'[RATING] Rider {user_id} rated {rating} on {booking.booking_number}, average {profile.ratings}')
        self.notifications.rating_submitted(booking, user_room(user_id), entry)
        return {'booking': booking, 'rating': entry, 'average': profile.ratings, 'total_ratings': profile.total_ratings}

    @service_result
    def driver_ratings(self, driver_id):
        driver = Driver.objects.filter(pk=parse_id(driver_id, 'driver id')).first()
        if driver is None:
            raise NotFound(f'Driver {driver_id} not found')
        records = RatingRecord.objects.filter(driver=driver, rater_role='user').select_related('booking')
        return {
            'driver_id': driver.id,
            'average': driver.ratings,
            'total_ratings': driver.total_ratings,
            'ratings': [_record_dict(record) for record in records],
        }

    @service_result
    def rider_ratings(self, user_id, actor):
        user_id = parse_id(user_id, 'user id')
        if actor.id != user_id and not is_admin(actor):
            raise Forbidden('Not allowed to view ratings for this user')
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise NotFound(f'User {user_id} not found')
        profile, _ = Profile.objects.get_or_create(user=user)
        records = RatingRecord.objects.filter(user=user, rater_role='driver').select_related('booking')
        return {
            'user_id': user.id,
            'average': profile.ratings,
            'total_ratings': profile.total_ratings,
            'ratings': [_record_dict(record) for record in records],
        }
