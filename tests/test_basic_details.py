import asyncio

from service_modules.basic_details_service import BasicDetailsService, COLLECTION, GYM_DETAILS_ID


def save(service, **values):
    details = {"phone": "1234567890", "email": "hello@fitmaker.com", "address": "1 Main St"}
    details.update(values)
    return asyncio.run(service.save(details))


def test_defaults_when_missing(store):
    details = asyncio.run(BasicDetailsService(store).get())
    assert details == {"phone": "", "email": "", "address": ""}


def test_save_and_read_back(store):
    service = BasicDetailsService(store)
    result = save(service, address="  1 Main St  ")
    assert result.ok
    assert result.notice.message == "Basic details updated successfully!"

    details = asyncio.run(service.get())
    assert details["address"] == "1 Main St"
    assert details["updatedAt"]


def test_validation_order(store):
    service = BasicDetailsService(store)
    # Missing field is reported before a bad email
    assert save(service, address="", email="bad").notice.message == "Please fill in all fields"
    assert save(service, email="a@b").notice.message == "Please enter a valid email address"
    assert save(service, phone="123456789").notice.message == "Please enter a valid phone number"
    assert asyncio.run(store.get(COLLECTION, GYM_DETAILS_ID)) is None


def test_save_merges_with_existing_fields(store):
    asyncio.run(store.set(COLLECTION, GYM_DETAILS_ID, {"openingHours": "6-22"}))
    save(BasicDetailsService(store))
    record = asyncio.run(store.get(COLLECTION, GYM_DETAILS_ID))
    assert record["openingHours"] == "6-22"
    assert record["phone"] == "1234567890"


def test_live_document_updates(store):
    seen = []
    service = BasicDetailsService(store)

    async def scenario():
        sub = service.subscribe(seen.append)
        await asyncio.sleep(0)
        await service.save({"phone": "1234567890", "email": "a@b.com", "address": "Main St"})
        await asyncio.sleep(0)
        sub.cancel()

    asyncio.run(scenario())
    assert seen[0]["phone"] == ""
    assert seen[1]["email"] == "a@b.com"
