# booking/tests/test_api.py

from datetime import date

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from booking.models import Booking, Client, Service, Staff
from staff.models import StaffAbsence, StaffShift

DAY = date(2025, 6, 10)  # a Tuesday -> day_of_week 2


class BookingApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cut = Service.objects.create(name="Cut", duration_minutes=30, regular_price="40")
        self.colour = Service.objects.create(name="Colour", duration_minutes=45, regular_price="POA")
        self.hidden = Service.objects.create(name="Old", duration_minutes=30, regular_price="10", active=False)
        self.anna = Staff.objects.create(name="Anna")
        self.ben = Staff.objects.create(name="Ben")

    def create_booking(self, start="10:00", staff=None, services=None):
        return self.client.post(
            "/api/bookings/",
            {
                "services": services or [self.cut.id],
                "staff": (staff or self.anna).id,
                "date": DAY.isoformat(),
                "start_time": start,
                "name": "Jo",
                "phone": "0400",
            },
            format="json",
        )

    # ----- services -----
    def test_public_service_list_hides_inactive(self):
        resp = self.client.get("/api/services/")
        self.assertEqual(resp.status_code, 200)
        names = [s["name"] for s in resp.json()]
        self.assertNotIn("Old", names)
        colour = next(s for s in resp.json() if s["name"] == "Colour")
        self.assertEqual(colour["price_display"], "POA")
        self.assertTrue(colour["is_poa"])

    def test_service_writes_need_staff(self):
        resp = self.client.patch(f"/api/services/{self.cut.id}/", {"regular_price": "45"}, format="json")
        self.assertIn(resp.status_code, (401, 403))

        admin = User.objects.create_user(username="boss", password="pw", is_staff=True)
        self.client.force_authenticate(admin)
        resp = self.client.patch(f"/api/services/{self.cut.id}/", {"regular_price": "45+"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["price_display"], "$45.00+")

    # ----- clients -----
    def test_client_create_reuses_same_name_and_phone(self):
        first = self.client.post("/api/clients/", {"full_name": "Jo Smith", "phone": "0400"}, format="json")
        again = self.client.post("/api/clients/", {"full_name": "jo smith", "phone": "0400"}, format="json")
        self.assertEqual(first.status_code, 201)
        self.assertEqual(again.status_code, 200)
        self.assertEqual(Client.objects.count(), 1)

    # ----- bookings -----
    def test_create_booking(self):
        resp = self.create_booking()
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["start_time"], "10:00")
        self.assertEqual(body["end_time"], "10:30")
        self.assertEqual(body["service_names"], ["Cut"])

    def test_overlapping_booking_is_400(self):
        self.create_booking("10:00")
        resp = self.create_booking("10:15")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("overlaps", resp.json()["detail"])

    def test_inactive_service_cannot_be_booked(self):
        resp = self.create_booking(services=[self.hidden.id])
        self.assertEqual(resp.status_code, 400)

    def test_bad_start_time_is_400(self):
        self.assertEqual(self.create_booking("9am").status_code, 400)

    def test_patch_cannot_change_time(self):
        booking_id = self.create_booking().json()["id"]
        resp = self.client.patch(f"/api/bookings/{booking_id}/", {"start_time": "11:00"}, format="json")
        self.assertEqual(resp.status_code, 400)
        resp = self.client.patch(f"/api/bookings/{booking_id}/", {"notes": "Allergic"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["notes"], "Allergic")

    def test_availability(self):
        self.create_booking("09:00")
        resp = self.client.get(
            "/api/bookings/availability/",
            {"date": DAY.isoformat(), "service": [self.cut.id], "staff": [self.anna.id]},
        )
        self.assertEqual(resp.status_code, 200)
        slots = resp.json()["slots"]
        self.assertNotIn("09:00", slots)
        self.assertNotIn("09:15", slots)
        self.assertEqual(slots[0], "09:30")

    def test_availability_for_one_stylist_and_several_services(self):
        # cut (30) + colour (45) as one 75 minute booking with Anna
        query = {"date": DAY.isoformat(), "service": [self.cut.id, self.colour.id], "staff": [self.anna.id]}

        free_day = self.client.get("/api/bookings/availability/", query).json()["slots"]
        self.assertEqual(len(free_day), 47)
        self.assertEqual(self.create_booking("09:00", services=[self.cut.id, self.colour.id]).status_code, 201)

        slots = self.client.get("/api/bookings/availability/", query).json()["slots"]
        for blocked in ("09:00", "09:30", "10:00"):
            self.assertNotIn(blocked, slots)
        self.assertEqual(slots[0], "10:15")
        self.assertEqual(self.create_booking("10:15", services=[self.cut.id, self.colour.id]).status_code, 201)

    def test_availability_combined_flag_uses_first_stylist(self):
        self.create_booking("10:30", staff=self.ben)
        query = {
            "date": DAY.isoformat(),
            "service": [self.cut.id, self.colour.id],
            "staff": [self.anna.id, self.ben.id],
        }

        combined = self.client.get("/api/bookings/availability/", {**query, "combined": "1"}).json()["slots"]
        self.assertEqual(len(combined), 47)

        paired = self.client.get("/api/bookings/availability/", query).json()["slots"]
        self.assertIn("09:15", paired)
        self.assertNotIn("09:30", paired)
        self.assertNotIn("10:00", paired)

    def test_availability_without_staff_returns_full_grid(self):
        resp = self.client.get("/api/bookings/availability/", {"date": DAY.isoformat(), "service": [self.cut.id]})
        self.assertEqual(len(resp.json()["slots"]), 47)

    def test_availability_needs_valid_date(self):
        self.assertEqual(self.client.get("/api/bookings/availability/").status_code, 400)
        resp = self.client.get("/api/bookings/availability/", {"date": "10/06/2025"})
        self.assertEqual(resp.status_code, 400)

    def test_availability_unknown_service_is_404(self):
        resp = self.client.get(
            "/api/bookings/availability/",
            {"date": DAY.isoformat(), "service": ["999"], "staff": [self.anna.id]},
        )
        self.assertEqual(resp.status_code, 404)

    def test_consecutive(self):
        resp = self.client.post(
            "/api/bookings/consecutive/",
            {
                "name": "Jo",
                "phone": "0400",
                "date": DAY.isoformat(),
                "start_time": "10:00",
                "items": [
                    {"service": self.cut.id, "staff": self.anna.id},
                    {"service": self.colour.id, "staff": self.ben.id},
                ],
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual([(b["start_time"], b["end_time"]) for b in body], [("10:00", "10:30"), ("10:30", "11:15")])
        self.assertEqual(body[1]["total_price"], "POA")

    def test_move_and_cancel(self):
        booking_id = self.create_booking("10:00").json()["id"]

        resp = self.client.post(f"/api/bookings/{booking_id}/move/", {"start_time": "12:00", "staff": self.ben.id}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["staff"], self.ben.id)
        self.assertEqual(resp.json()["end_time"], "12:30")

        resp = self.client.post(f"/api/bookings/{booking_id}/cancel/", {"reason": "Changed plans"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Booking.objects.get(pk=booking_id).status, Booking.STATUS_CANCELLED)

        resp = self.client.post(f"/api/bookings/{booking_id}/cancel/", {}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_set_status(self):
        booking_id = self.create_booking().json()["id"]
        resp = self.client.post(f"/api/bookings/{booking_id}/status/", {"status": "confirmed"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "confirmed")

    def test_day_view(self):
        StaffShift.objects.create(staff=self.anna, day_of_week=2, start_time="09:00", end_time="17:00")
        StaffShift.objects.create(staff=self.ben, specific_date=DAY, start_time="09:00", end_time="17:00")
        StaffAbsence.objects.create(staff=self.ben, absence_date=DAY, absence_type="Sick Leave")
        self.create_booking("10:00")
        Booking.objects.create(name="Walk-in", date=DAY, start_time="13:00", end_time="13:30")

        resp = self.client.get("/api/bookings/day/", {"date": DAY.isoformat()})

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual([s["name"] for s in body["staff"]], ["Anna"])
        self.assertEqual(len(body["bookings"][str(self.anna.id)]), 1)
        self.assertEqual(len(body["unassigned"]), 1)
        self.assertEqual(len(body["slots"]), 47)

    def test_working_staff(self):
        StaffShift.objects.create(staff=self.ben, day_of_week=2, start_time="09:00", end_time="17:00")
        resp = self.client.get("/api/staff/working/", {"date": DAY.isoformat()})
        self.assertEqual([s["name"] for s in resp.json()], ["Ben"])
