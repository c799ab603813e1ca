"""
Lead Service - contact leads submitted through the public app (user_data).

Leads are read-only apart from their status flag. The admin can switch the
list order, mark a lead as read, export the list as a spreadsheet and get a
tel: link to call the lead back.
"""
import io
import logging
from datetime import datetime
from typing import List, Optional

from openpyxl import Workbook

from models import Notice
from .exceptions import AdminError, ValidationError, WriteError, DocumentNotFound
from .sync_controller import CollectionSyncController

logger = logging.getLogger("fitmaker_admin")

SORT_CREATED = "created_at"
SORT_ID_DESC = "id_desc"
SORT_MODES = (SORT_CREATED, SORT_ID_DESC)

EXPORT_COLUMNS = ["ID", "Name", "Age", "Contact", "Date", "Status"]
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _parse_time(value) -> float:
    if not value:
        return 0.0
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


def _parse_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def sort_leads(records: List[dict], sort_by: str = SORT_CREATED) -> List[dict]:
    """Newest first by default; id_desc orders by numeric Data_id, non-numeric ids count as 0."""
    if sort_by == SORT_ID_DESC:
        return sorted(records, key=lambda r: _parse_id(r.get("Data_id")), reverse=True)
    return sorted(records, key=lambda r: _parse_time(r.get("created_at")), reverse=True)


def format_date(value) -> str:
    if not value:
        return "N/A"
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return str(value)


def call_link(phone: Optional[str]) -> Optional[str]:
    if not phone or not str(phone).strip():
        return None
    return f"tel:{str(phone).strip()}"


class LeadService:
    """Service for the contact leads screen."""

    def export(self, records: List[dict], sort_by: str = SORT_CREATED) -> bytes:
        if not records:
            raise ValidationError("No data to export", title="Info")

        wb = Workbook()
        ws = wb.active
        ws.title = "UserData"
        ws.append(EXPORT_COLUMNS)
        for item in sort_leads(records, sort_by):
            ws.append([
                item.get("Data_id"),
                item.get("user_name") or "N/A",
                item.get("user_age") or "N/A",
                item.get("user_contact") or "N/A",
                format_date(item.get("created_at")),
                "Read" if item.get("status") == "read" else "Unread",
            ])

        buf = io.BytesIO()
        wb.save(buf)
        logger.info(f"Exported {len(records)} leads")
        return buf.getvalue()

    async def mark_as_read(self, controller: CollectionSyncController, record_id: str) -> Optional[Notice]:
        """Flip status to read. Already-read leads are left alone. Returns a Notice on failure."""
        record = controller.find(record_id)
        if record is not None and record.get("status") == "read":
            return None

        try:
            await controller.gateway.patch(controller.entity, record_id, {"status": "read"})
        except AdminError as e:
            return Notice(**e.to_dict())
        except DocumentNotFound:
            return Notice(**WriteError(controller.entity.messages["save_failed"]).to_dict())
        return None


# Singleton instance
lead_service = LeadService()


def get_lead_service() -> LeadService:
    """Dependency injection helper."""
    return lead_service
