import asyncio
import io

from openpyxl import load_workbook
import pytest

from service_modules.entities import LEADS
from service_modules.exceptions import ValidationError
from service_modules.lead_service import LeadService, sort_leads, call_link, format_date
from service_modules.sync_controller import CollectionSyncController

LEADS_DATA = [
    {"id": "a", "Data_id": "7", "user_name": "Ann", "user_age": 31, "user_contact": "5551234567",
     "created_at": "2024-03-01T10:00:00", "status": "read"},
    {"id": "b", "Data_id": "12", "user_name": "Ben", "user_age": None, "user_contact": "5559876543",
     "created_at": "2024-03-05T09:30:00", "status": "unread"},
    {"id": "c", "Data_id": "x", "user_name": None, "user_contact": None, "created_at": None, "status": "unread"},
]


def test_sort_newest_first_by_default():
    assert [r["id"] for r in sort_leads(LEADS_DATA)] == ["b", "a", "c"]


def test_sort_by_numeric_id_descending():
    assert [r["id"] for r in sort_leads(LEADS_DATA, "id_desc")] == ["b", "a", "c"]
    swapped = [dict(LEADS_DATA[0], Data_id="40"), LEADS_DATA[1]]
    assert [r["id"] for r in sort_leads(swapped, "id_desc")] == ["a", "b"]


def test_call_link():
    assert call_link(" 5551234567 ") == "tel:5551234567"
    assert call_link("") is None
    assert call_link(None) is None


def test_format_date():
    assert format_date(None) == "N/A"
    assert format_date("2024-03-05T09:30:00") == "2024-03-05 09:30"


def test_export_workbook():
    content = LeadService().export(LEADS_DATA)
    wb = load_workbook(io.BytesIO(content))
    ws = wb["UserData"]
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0] == ("ID", "Name", "Age", "Contact", "Date", "Status")
    assert rows[1] == ("12", "Ben", "N/A", "5559876543", "2024-03-05 09:30", "Unread")
    assert rows[2][5] == "Read"
    assert rows[3][1] == "N/A"


def test_export_empty_is_refused():
    with pytest.raises(ValidationError) as exc:
        LeadService().export([])
    assert exc.value.message == "No data to export"


def test_mark_as_read(store, gateway):
    async def scenario():
        doc_id = await store.create("user_data", {"Data_id": 1, "user_name": "Ann", "created_at": "2024-03-01T10:00:00"})
        controller = CollectionSyncController(LEADS, store, gateway)
        async with controller.open():
            await controller.ready()
            # Missing status reads as unread
            assert controller.find(doc_id)["status"] == "unread"
            notice = await LeadService().mark_as_read(controller, doc_id)
        return doc_id, notice

    doc_id, notice = asyncio.run(scenario())
    assert notice is None
    record = asyncio.run(store.get("user_data", doc_id))
    assert record["status"] == "read"
    assert "updatedAt" not in record


def test_mark_as_read_skips_already_read(store, gateway):
    async def scenario():
        doc_id = await store.create("user_data", {"Data_id": 1, "status": "read"})
        controller = CollectionSyncController(LEADS, store, gateway)
        async with controller.open():
            await controller.ready()
            calls = []
            original = gateway.patch

            async def spy(*args, **kwargs):
                calls.append(args)
                return await original(*args, **kwargs)

            gateway.patch = spy
            notice = await LeadService().mark_as_read(controller, doc_id)
        return notice, calls

    notice, calls = asyncio.run(scenario())
    assert notice is None
    assert calls == []
