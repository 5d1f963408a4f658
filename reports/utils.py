from collections import Counter
from decimal import Decimal, ROUND_HALF_UP

from bookings.utils import calculate_duration_days, calculate_total_price

CENT = Decimal('0.01')
TOP_USERS_LIMIT = 5


def compute_delegation_statistics(vehicles, bookings, tax_rate):
    """
    Per-delegation fleet and revenue figures.

    Entries are sorted by delegation id. A booking counts for the delegation
    owning its vehicle; bookings whose vehicle is not in ``vehicles`` are ignored.
    :param vehicles: Objects with ``id``, ``delegation_id``, ``rented`` and ``daily_rate``
    :param bookings: Objects with ``vehicle_id``, ``start_date`` and ``end_date``
    :param tax_rate: Decimal rate applied on top of the base price (0.21 for 21%)
    :return: List of dicts, one per delegation
    """
    tax_multiplier = Decimal(1) + Decimal(tax_rate)
    vehicles_by_id = {}
    statistics = {}

    for vehicle in vehicles:
        vehicles_by_id[vehicle.id] = vehicle
        entry = statistics.setdefault(vehicle.delegation_id, {
            'delegation': vehicle.delegation_id,
            'total_vehicles': 0,
            'rented_vehicles': 0,
            'available_vehicles': 0,
            'total_reservations': 0,
            'total_revenue': Decimal(0),
        })
        entry['total_vehicles'] += 1
        if vehicle.rented:
            entry['rented_vehicles'] += 1

    for booking in bookings:
        vehicle = vehicles_by_id.get(booking.vehicle_id)
        if vehicle is None:
            continue
        entry = statistics[vehicle.delegation_id]
        entry['total_reservations'] += 1
        entry['total_revenue'] += calculate_total_price(booking, vehicle) * tax_multiplier

    for entry in statistics.values():
        entry['available_vehicles'] = entry['total_vehicles'] - entry['rented_vehicles']
        entry['total_revenue'] = entry['total_revenue'].quantize(CENT, rounding=ROUND_HALF_UP)

    return sorted(statistics.values(), key=lambda entry: entry['delegation'])


def top_delegation_by_revenue(statistics):
    """
    The statistics entry with the highest revenue.
    On a tie the earliest entry wins; an empty list gives None.
    """
    top = None
    for entry in statistics:
        if top is None or entry['total_revenue'] > top['total_revenue']:
            top = entry
    return top


def compute_dashboard_summary(vehicles, bookings, today):
    """
    Back-office dashboard figures.
    :param vehicles: Objects with ``delegation_id``
    :param bookings: Objects with ``user_id``, ``start_date`` and ``end_date``
    :param today: Date used to decide which bookings are active
    :return: dict
    """
    vehicles_per_delegation = Counter(vehicle.delegation_id for vehicle in vehicles)
    active_bookings = [b for b in bookings if b.start_date <= today <= b.end_date]

    if bookings:
        total_days = sum(calculate_duration_days(b.start_date, b.end_date) for b in bookings)
        average_duration = (Decimal(total_days) / len(bookings)).quantize(CENT, rounding=ROUND_HALF_UP)
    else:
        average_duration = Decimal('0.00')

    # Counter.most_common keeps first-seen order between equal counts
    bookings_per_user = Counter(b.user_id for b in bookings)

    return {
        'total_bookings': len(bookings),
        'active_bookings': len(active_bookings),
        'average_booking_duration': average_duration,
        'active_users': len({b.user_id for b in active_bookings}),
        'top_users': [
            {'user_id': user_id, 'bookings': count}
            for user_id, count in bookings_per_user.most_common(TOP_USERS_LIMIT)
        ],
        'vehicles_per_delegation': dict(vehicles_per_delegation),
    }
