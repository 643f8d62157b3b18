import pytest

from jobledger.common.enums import ContractStatus
from jobledger.tests.factories import headers_for


@pytest.mark.asyncio
async def test_get_contract_as_client(client, client_profile, active_contract):
    response = await client.get(
        f"/api/v1/contracts/{active_contract.id}",
        headers=headers_for(client_profile),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == active_contract.id
    assert data["status"] == "in_progress"
    assert data["client_id"] == client_profile.id


@pytest.mark.asyncio
async def test_get_contract_as_contractor(client, contractor_profile, active_contract):
    response = await client.get(
        f"/api/v1/contracts/{active_contract.id}",
        headers=headers_for(contractor_profile),
    )
    assert response.status_code == 200
    assert response.json()["contractor_id"] == contractor_profile.id


@pytest.mark.asyncio
async def test_get_contract_of_other_parties_is_not_found(client, factory, active_contract):
    stranger = await factory.client()

    response = await client.get(
        f"/api/v1/contracts/{active_contract.id}",
        headers=headers_for(stranger),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_profile_is_unauthorized(client, active_contract):
    response = await client.get(
        f"/api/v1/contracts/{active_contract.id}",
        headers={"profile_id": "987654"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_missing_profile_header_is_rejected(client, active_contract):
    response = await client.get(f"/api/v1/contracts/{active_contract.id}")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_contracts_skips_terminated(client, factory, client_profile, contractor_profile):
    new = await factory.contract(client_profile, contractor_profile, status=ContractStatus.NEW)
    active = await factory.contract(client_profile, contractor_profile)
    await factory.contract(client_profile, contractor_profile, status=ContractStatus.TERMINATED)
    other_client = await factory.client()
    await factory.contract(other_client, contractor_profile)

    response = await client.get("/api/v1/contracts", headers=headers_for(client_profile))
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [new.id, active.id]


@pytest.mark.asyncio
async def test_list_contracts_empty(client, factory):
    loner = await factory.client()

    response = await client.get("/api/v1/contracts", headers=headers_for(loner))
    assert response.status_code == 200
    assert response.json() == []
