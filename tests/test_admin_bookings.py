import datetime as dt
import unittest

from laundrylink.admin_bookings import (
    ALL,
    DISPLAY_COLUMNS,
    BookingFilters,
    apply_filters,
    bookings_frame,
    page_count,
    paginate,
    service_types,
    sort_bookings,
    to_csv,
)

PROFILES = [
    {"id": "alice", "email": "alice@hostel.edu"},
    {"id": "bob", "email": "bob@hostel.edu"},
]

BOOKINGS = [
    {"id": "b1", "user_id": "alice", "machine_id": "W1", "machines": {"name": "Washer 1", "type": "washer"},
     "service_type": "Wash", "booking_date": "2026-10-20", "time_slot": "08:00 - 09:00",
     "status": "upcoming", "cost": 50, "created_at": "2026-10-18T09:00:00+00:00"},
    {"id": "b2", "user_id": "bob", "machine_id": "D1", "machines": None,
     "service_type": "Dry", "booking_date": "2026-10-19", "time_slot": "09:00 - 10:00",
     "status": "Upcoming", "cost": 30, "created_at": "2026-10-17T09:00:00+00:00"},
    {"id": "b3", "user_id": "ghost", "machine_id": "W2", "machines": {"name": "Washer 2", "type": "washer"},
     "service_type": "Wash", "booking_date": "2026-10-20", "time_slot": "10:00 - 11:00",
     "status": "cancelled", "cost": 50, "created_at": "2026-10-16T09:00:00+00:00"},
]


class BookingsFrameTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.df = bookings_frame(BOOKINGS, PROFILES)

    def test_email_and_machine_name_flattened(self) -> None:
        self.assertEqual(self.df["email"].tolist(), ["alice@hostel.edu", "bob@hostel.edu", "Unknown"])
        self.assertEqual(self.df["machine_name"].tolist(), ["Washer 1", "D1", "Washer 2"])

    def test_empty(self) -> None:
        df = bookings_frame([], PROFILES)
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), DISPLAY_COLUMNS)
        self.assertTrue(apply_filters(df, BookingFilters()).empty)
        self.assertEqual(service_types(df), [])

    def test_service_types(self) -> None:
        self.assertEqual(service_types(self.df), ["Wash", "Dry"])

    def test_search_matches_email_machine_or_id(self) -> None:
        ids = lambda f: apply_filters(self.df, f)["id"].tolist()
        self.assertEqual(ids(BookingFilters(search="ALICE")), ["b1"])
        self.assertEqual(ids(BookingFilters(search="washer 2")), ["b3"])
        self.assertEqual(ids(BookingFilters(search="b2")), ["b2"])

    def test_status_filter_ignores_case(self) -> None:
        result = apply_filters(self.df, BookingFilters(status="upcoming", sort_field="id", sort_direction="asc"))
        self.assertEqual(result["id"].tolist(), ["b1", "b2"])

    def test_service_and_date_filters(self) -> None:
        filters = BookingFilters(service="Wash", booking_date=dt.date(2026, 10, 20),
                                 sort_field="id", sort_direction="asc")
        self.assertEqual(apply_filters(self.df, filters)["id"].tolist(), ["b1", "b3"])

    def test_default_sort_newest_booking_date_first_and_stable(self) -> None:
        result = apply_filters(self.df, BookingFilters())
        self.assertEqual(result["id"].tolist(), ["b1", "b3", "b2"])

    def test_sort_created_at_ascending(self) -> None:
        result = sort_bookings(self.df, "created_at", "asc")
        self.assertEqual(result["id"].tolist(), ["b3", "b2", "b1"])

    def test_sort_unknown_field_is_noop(self) -> None:
        self.assertEqual(sort_bookings(self.df, "nope")["id"].tolist(), ["b1", "b2", "b3"])

    def test_csv_export(self) -> None:
        lines = to_csv(self.df).decode("utf-8").splitlines()
        self.assertEqual(lines[0], ",".join(DISPLAY_COLUMNS))
        self.assertEqual(len(lines), 4)


class FiltersTestCase(unittest.TestCase):
    def test_toggle_sort(self) -> None:
        filters = BookingFilters()
        filters.toggle_sort("booking_date")
        self.assertEqual(filters.sort_direction, "asc")
        filters.toggle_sort("booking_date")
        self.assertEqual(filters.sort_direction, "desc")
        filters.toggle_sort("cost")
        self.assertEqual((filters.sort_field, filters.sort_direction), ("cost", "asc"))

    def test_reset(self) -> None:
        filters = BookingFilters(search="x", status="cancelled", service="Dry",
                                 booking_date=dt.date(2026, 1, 1), sort_field="cost", sort_direction="asc")
        filters.reset()
        self.assertEqual(filters, BookingFilters())
        self.assertEqual(filters.status, ALL)


class PaginationTestCase(unittest.TestCase):
    def test_page_count(self) -> None:
        self.assertEqual(page_count(0), 0)
        self.assertEqual(page_count(10), 1)
        self.assertEqual(page_count(21), 3)

    def test_paginate_clamps(self) -> None:
        rows = [dict(BOOKINGS[0], id=f"b{i}") for i in range(21)]
        df = bookings_frame(rows, PROFILES)
        self.assertEqual(len(paginate(df, 1)), 10)
        self.assertEqual(paginate(df, 3)["id"].tolist(), ["b20"])
        self.assertEqual(paginate(df, 9)["id"].tolist(), ["b20"])
        self.assertEqual(paginate(df, 0)["id"].tolist()[0], "b0")


if __name__ == "__main__":
    unittest.main()
