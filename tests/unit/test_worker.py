import pytest

from inboxiq.features.leads.jobs import run_lead_recency_refresh
from inboxiq.features.leads.pipeline.recency import contact_recency_service
from inboxiq.jobs import worker


@pytest.mark.asyncio
async def test_run_worker_runs_job(monkeypatch):
    called = {"ok": False}

    async def dummy_job():
        called["ok"] = True

    monkeypatch.setitem(worker.JOB_REGISTRY, "dummy", dummy_job)

    await worker.run_worker("dummy")

    assert called["ok"] is True


@pytest.mark.asyncio
async def test_run_worker_unknown_job():
    with pytest.raises(ValueError):
        await worker.run_worker("missing")


def test_recency_refresh_is_registered():
    assert worker.JOB_REGISTRY["lead_recency_refresh"] is run_lead_recency_refresh


def test_resolve_job_name_defaults_to_recency_refresh(monkeypatch):
    monkeypatch.setattr(worker.sys, "argv", ["worker"])
    monkeypatch.delenv("WORKER_JOB", raising=False)

    assert worker._resolve_job_name() == "lead_recency_refresh"


@pytest.mark.asyncio
async def test_recency_refresh_job_continues_after_user_failure(monkeypatch, lead_store):
    lead_store.add_lead("user-a", "a@client.com")
    lead_store.add_lead("user-b", "b@client.com")
    lead_store.add_lead("user-b", "c@client.com")

    original = contact_recency_service.refresh_all_leads

    async def flaky_refresh(user_id, **kwargs):
        if user_id == "user-a":
            raise RuntimeError("boom")
        return await original(user_id, **kwargs)

    monkeypatch.setattr(contact_recency_service, "refresh_all_leads", flaky_refresh)

    summary = await run_lead_recency_refresh()

    assert summary.failed_users == ["user-a"]
    assert summary.users_processed == 1
    assert summary.leads_updated == 2


@pytest.mark.asyncio
async def test_recency_refresh_job_with_no_leads(lead_store):
    summary = await run_lead_recency_refresh()

    assert summary.users_processed == 0
    assert summary.leads_updated == 0
