"""
Dashboard Service - record counts per managed collection.
"""
from .document_store import DocumentStore
from .entities import ENTITIES, LEADS


class DashboardService:
    async def summary(self, store: DocumentStore) -> dict:
        counts = {}
        unread = 0
        for collection in ENTITIES:
            records = await store.list(collection)
            counts[collection] = len(records)
            if collection == LEADS.collection:
                unread = sum(1 for r in records if r.get("status", "unread") != "read")
        return {"counts": counts, "unread_leads": unread}


# Singleton instance
dashboard_service = DashboardService()


def get_dashboard_service() -> DashboardService:
    """Dependency injection helper."""
    return dashboard_service
