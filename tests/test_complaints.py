"""
Tests for Complaint Endpoints

Tests cover:
- Filing complaints with a category due date
- Listing with filters and SLA badges
- Status updates, assignment and student notification
- Feedback on completed complaints
"""
import pytest
from datetime import timedelta
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from campusdesk.models.complaint import Complaint, ComplaintCategory, ComplaintStatus
from campusdesk.models.notification import Notification, NotificationType
from campusdesk.models.staff import Staff
from tests.conftest import ComplaintFactory, StaffFactory, store_raw_due_date


# -----------------------------------------------------------------------------
# Filing
# -----------------------------------------------------------------------------

class TestComplaintCreation:

    @pytest.mark.asyncio
    async def test_create_complaint(self, client: AsyncClient):
        """A new complaint is open and due after its category window."""
        payload = {
            "student_id": "student-42",
            "title": "Wi-Fi down in library",
            "description": "No connectivity since morning",
            "category": "technical"
        }

        response = await client.post("/api/v1/complaints", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "open"
        assert data["category"] == "technical"
        assert data["category_icon"] == "💻"
        assert data["status_color"] == "warning"
        # Exactly 24h left only if the clock has not moved since filing
        assert data["sla"]["band"] in ("warning", "on_track")

    @pytest.mark.asyncio
    async def test_due_date_from_category(self, client: AsyncClient, db_session: AsyncSession):
        payload = {
            "student_id": "student-42",
            "title": "Leaking tap",
            "description": "Room 204 bathroom",
            "category": "hostel"
        }

        response = await client.post("/api/v1/complaints", json=payload)

        complaint = await db_session.get(Complaint, response.json()["id"])
        assert complaint.due_date - complaint.created_at == timedelta(days=2)

    @pytest.mark.asyncio
    async def test_create_complaint_invalid_category(self, client: AsyncClient):
        payload = {
            "student_id": "student-42",
            "title": "Something",
            "description": "Something else",
            "category": "canteen"
        }

        response = await client.post("/api/v1/complaints", json=payload)

        assert response.status_code == 422


# -----------------------------------------------------------------------------
# Listing
# -----------------------------------------------------------------------------

class TestComplaintListing:

    @pytest.mark.asyncio
    async def test_list_with_badges(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        frozen_clock
    ):
        await ComplaintFactory.create(db_session, due_in=timedelta(hours=-2))
        await ComplaintFactory.create(db_session, due_in=timedelta(minutes=30))
        await ComplaintFactory.create(db_session, status=ComplaintStatus.RESOLVED)

        response = await client.get("/api/v1/complaints")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        labels = sorted(c["sla"]["label"] for c in data["complaints"])
        assert labels == ["30m remaining", "Completed", "Overdue by 2h"]

    @pytest.mark.asyncio
    async def test_filter_by_status_and_student(self, client: AsyncClient, db_session: AsyncSession):
        await ComplaintFactory.create(db_session, student_id="student-a")
        await ComplaintFactory.create(db_session, student_id="student-a", status=ComplaintStatus.CLOSED)
        await ComplaintFactory.create(db_session, student_id="student-b")

        response = await client.get(
            "/api/v1/complaints",
            params={"status": "open", "student_id": "student-a"}
        )

        data = response.json()
        assert data["total"] == 1
        assert data["complaints"][0]["student_id"] == "student-a"
        assert data["complaints"][0]["status"] == "open"

    @pytest.mark.asyncio
    async def test_filter_by_category(self, client: AsyncClient, db_session: AsyncSession):
        await ComplaintFactory.create(db_session, category=ComplaintCategory.ACADEMIC)
        await ComplaintFactory.create(db_session, category=ComplaintCategory.HOSTEL)

        response = await client.get("/api/v1/complaints", params={"category": "academic"})

        data = response.json()
        assert data["total"] == 1
        assert data["complaints"][0]["category_icon"] == "🎓"

    @pytest.mark.asyncio
    async def test_get_complaint_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/complaints/does-not-exist")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_undated_complaint_has_no_label(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        frozen_clock
    ):
        complaint = await ComplaintFactory.create(db_session, due_in=None)

        response = await client.get(f"/api/v1/complaints/{complaint.id}")

        sla = response.json()["sla"]
        assert sla["band"] == "none"
        assert sla["label"] is None
        assert sla["variant"] is None

    @pytest.mark.asyncio
    async def test_total_counts_all_matches_not_page(self, client: AsyncClient, db_session: AsyncSession):
        for _ in range(3):
            await ComplaintFactory.create(db_session, category=ComplaintCategory.TECHNICAL)
        await ComplaintFactory.create(db_session, category=ComplaintCategory.ACADEMIC)

        response = await client.get(
            "/api/v1/complaints",
            params={"category": "technical", "limit": 2}
        )

        data = response.json()
        assert len(data["complaints"]) == 2
        assert data["total"] == 3

    @pytest.mark.asyncio
    async def test_bad_stored_due_date_is_422(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        open_complaint: Complaint,
        frozen_clock
    ):
        await store_raw_due_date(db_session, open_complaint.id)

        listing = await client.get("/api/v1/complaints")
        single = await client.get(f"/api/v1/complaints/{open_complaint.id}")

        assert listing.status_code == 422
        assert single.status_code == 422
        assert "due_date" in listing.json()["detail"]
        assert "due_date" in single.json()["detail"]


# -----------------------------------------------------------------------------
# Updates
# -----------------------------------------------------------------------------

class TestComplaintUpdates:

    @pytest.mark.asyncio
    async def test_status_change_notifies_student(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        open_complaint: Complaint
    ):
        response = await client.patch(
            f"/api/v1/complaints/{open_complaint.id}",
            json={"status": "in_progress", "admin_id": "admin-1"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"
        assert response.json()["admin_id"] == "admin-1"

        result = await db_session.execute(
            select(Notification).where(Notification.user_id == open_complaint.student_id)
        )
        notifications = result.scalars().all()
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.STATUS_CHANGE
        assert notifications[0].message == 'Your complaint "Test Complaint" is now in progress'

    @pytest.mark.asyncio
    async def test_note_only_update_does_not_notify(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        open_complaint: Complaint
    ):
        response = await client.patch(
            f"/api/v1/complaints/{open_complaint.id}",
            json={"resolution_note": "Plumber booked"}
        )

        assert response.json()["resolution_note"] == "Plumber booked"
        result = await db_session.execute(select(Notification))
        assert result.scalars().all() == []

    @pytest.mark.asyncio
    async def test_assign_to_staff(
        self,
        client: AsyncClient,
        open_complaint: Complaint,
        warden: Staff
    ):
        response = await client.patch(
            f"/api/v1/complaints/{open_complaint.id}",
            json={"assigned_to": warden.id}
        )

        assert response.status_code == 200
        assert response.json()["assigned_to"] == warden.id

    @pytest.mark.asyncio
    async def test_assign_to_inactive_staff_rejected(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        open_complaint: Complaint
    ):
        staff = await StaffFactory.create(db_session, is_active=False)

        response = await client.patch(
            f"/api/v1/complaints/{open_complaint.id}",
            json={"assigned_to": staff.id}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_missing_complaint(self, client: AsyncClient):
        response = await client.patch("/api/v1/complaints/missing", json={"status": "closed"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_resolved_badge_is_completed(self, client: AsyncClient, open_complaint: Complaint):
        response = await client.patch(
            f"/api/v1/complaints/{open_complaint.id}",
            json={"status": "resolved"}
        )

        sla = response.json()["sla"]
        assert sla == {"band": "completed", "label": "Completed", "urgency": "low", "variant": "secondary"}


# -----------------------------------------------------------------------------
# Feedback
# -----------------------------------------------------------------------------

class TestFeedback:

    @pytest.mark.asyncio
    async def test_feedback_on_resolved_complaint(self, client: AsyncClient, db_session: AsyncSession):
        complaint = await ComplaintFactory.create(db_session, status=ComplaintStatus.RESOLVED)

        response = await client.post(
            f"/api/v1/complaints/{complaint.id}/feedback",
            json={"rating": 4, "feedback": "Fixed quickly"}
        )

        assert response.status_code == 200
        assert response.json()["rating"] == 4
        assert response.json()["feedback"] == "Fixed quickly"

    @pytest.mark.asyncio
    async def test_feedback_on_open_complaint_conflicts(self, client: AsyncClient, open_complaint: Complaint):
        response = await client.post(
            f"/api/v1/complaints/{open_complaint.id}/feedback",
            json={"rating": 5}
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_out_of_range(self, client: AsyncClient, db_session: AsyncSession, rating: int):
        complaint = await ComplaintFactory.create(db_session, status=ComplaintStatus.CLOSED)

        response = await client.post(
            f"/api/v1/complaints/{complaint.id}/feedback",
            json={"rating": rating}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_feedback_missing_complaint(self, client: AsyncClient):
        response = await client.post("/api/v1/complaints/missing/feedback", json={"rating": 3})

        assert response.status_code == 404
