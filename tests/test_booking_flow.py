import datetime as dt
import unittest

from laundrylink.booking_flow import (
    TIME_SLOTS,
    BookingRequest,
    available_slots,
    format_long_date,
    generate_confirmation_text,
    get_missing_fields,
    group_bookings_by_date,
    is_upcoming,
    status_counts,
    validate_request,
)
from laundrylink.errors import ValidationError

TODAY = dt.date(2026, 10, 19)


class ValidateRequestTestCase(unittest.TestCase):
    def test_slots_skip_lunch_hour(self) -> None:
        self.assertEqual(len(TIME_SLOTS), 8)
        self.assertNotIn("12:00 - 13:00", TIME_SLOTS)

    def test_missing_date_or_slot(self) -> None:
        request = BookingRequest(service_type="Wash", machine_id="W1")
        with self.assertRaises(ValidationError) as ctx:
            validate_request(request, today=TODAY)
        self.assertEqual(str(ctx.exception), "Please select a date and time slot")

    def test_missing_fields_listed(self) -> None:
        request = BookingRequest(booking_date=TODAY)
        self.assertEqual(get_missing_fields(request), ["time_slot", "service_type", "machine_id"])

    def test_past_date_rejected(self) -> None:
        request = BookingRequest(TODAY - dt.timedelta(days=1), "08:00 - 09:00", "Wash", "W1")
        with self.assertRaises(ValidationError):
            validate_request(request, today=TODAY)
        self.assertIn("booking_date", request.errors)

    def test_unknown_slot_rejected(self) -> None:
        request = BookingRequest(TODAY, "12:00 - 13:00", "Wash", "W1")
        with self.assertRaises(ValidationError):
            validate_request(request, today=TODAY)
        self.assertIn("time_slot", request.errors)

    def test_valid_request(self) -> None:
        request = BookingRequest(TODAY, "08:00 - 09:00", "Wash", "W1")
        self.assertIs(validate_request(request, today=TODAY), request)
        self.assertEqual(request.errors, {})
        self.assertEqual(request.to_payload()["booking_date"], "2026-10-19")


class SlotTestCase(unittest.TestCase):
    def test_taken_slots_removed_and_cancelled_freed(self) -> None:
        bookings = [
            {"machine_id": 1, "booking_date": "2026-10-20", "time_slot": "08:00 - 09:00", "status": "upcoming"},
            {"machine_id": "1", "booking_date": "2026-10-20", "time_slot": "09:00 - 10:00", "status": "Cancelled"},
            {"machine_id": "2", "booking_date": "2026-10-20", "time_slot": "10:00 - 11:00", "status": "upcoming"},
            {"machine_id": "1", "booking_date": "2026-10-21", "time_slot": "11:00 - 12:00", "status": "upcoming"},
        ]
        slots = available_slots(bookings, "1", dt.date(2026, 10, 20))
        self.assertNotIn("08:00 - 09:00", slots)
        self.assertIn("09:00 - 10:00", slots)
        self.assertIn("10:00 - 11:00", slots)
        self.assertIn("11:00 - 12:00", slots)
        self.assertEqual(len(slots), 7)

    def test_all_slots_without_machine(self) -> None:
        self.assertEqual(available_slots([], None, TODAY), TIME_SLOTS)


class HistoryHelpersTestCase(unittest.TestCase):
    def test_format_long_date(self) -> None:
        self.assertEqual(format_long_date(TODAY), "Monday, October 19, 2026")
        self.assertEqual(format_long_date("2026-10-20"), "Tuesday, October 20, 2026")
        self.assertEqual(format_long_date("not a date"), "")

    def test_is_upcoming(self) -> None:
        now = dt.datetime(2026, 10, 19, 12, 0)
        later = {"booking_date": "2026-10-19", "time_slot": "13:00 - 14:00", "status": "Upcoming"}
        earlier = {"booking_date": "2026-10-19", "time_slot": "08:00 - 09:00", "status": "upcoming"}
        cancelled = {"booking_date": "2026-10-20", "time_slot": "08:00 - 09:00", "status": "cancelled"}
        self.assertTrue(is_upcoming(later, now=now))
        self.assertFalse(is_upcoming(earlier, now=now))
        self.assertFalse(is_upcoming(cancelled, now=now))
        self.assertFalse(is_upcoming({}, now=now))

    def test_status_counts_ignore_case(self) -> None:
        counts = status_counts([
            {"status": "upcoming"}, {"status": "Upcoming"}, {"status": "cancelled"}, {"status": None},
        ])
        self.assertEqual(counts, {"upcoming": 2, "completed": 0, "cancelled": 1})

    def test_group_by_date_keeps_order(self) -> None:
        groups = group_bookings_by_date([
            {"id": 1, "booking_date": "2026-10-21"},
            {"id": 2, "booking_date": "2026-10-20"},
            {"id": 3, "booking_date": "2026-10-21"},
        ])
        self.assertEqual(list(groups), ["2026-10-21", "2026-10-20"])
        self.assertEqual([b["id"] for b in groups["2026-10-21"]], [1, 3])

    def test_confirmation_text(self) -> None:
        request = BookingRequest(TODAY, "08:00 - 09:00", "Wash", "W1")
        text = generate_confirmation_text(request, 50)
        self.assertIn("Monday, October 19, 2026", text)
        self.assertIn("₹50.00", text)


if __name__ == "__main__":
    unittest.main()
