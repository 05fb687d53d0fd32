"""
test_provisioner.py — Unit tests for engine/provisioner.py

Covers batch partitioning, cache-busting, concurrent batch provisioning with
inter-batch pauses, and the always-recoverable navigation policy.
"""

import asyncio
from dataclasses import replace
from urllib.parse import parse_qs, urlsplit

from fakes import FakeContext, FakeElement, FakePage

from tabburst.core.config import BurstConfig
from tabburst.core.results import ErrorKind
from tabburst.engine.provisioner import TabProvisioner, cache_bust, partition

TARGET = "https://example.test/app"


def _authed_page(n):
    return FakePage(css={"nav": [FakeElement()]})


# ── partition ─────────────────────────────────────────────────────────────────


class TestPartition:
    def test_twenty_three_by_ten(self):
        assert [len(b) for b in partition(23, 10)] == [10, 10, 3]

    def test_ranges_are_consecutive(self):
        batches = partition(23, 10)
        assert [i for b in batches for i in b] == list(range(23))

    def test_prompt_batches_bounded_by_fifteen(self):
        cfg = BurstConfig(tabs=23)
        assert [len(b) for b in partition(cfg.tabs, cfg.prompt_batch)] == [15, 8]

    def test_small_run_is_one_batch(self):
        cfg = BurstConfig(tabs=4)
        assert cfg.provision_batch == 4
        assert [len(b) for b in partition(cfg.tabs, cfg.provision_batch)] == [4]

    def test_empty(self):
        assert partition(0, 10) == []


# ── cache_bust ────────────────────────────────────────────────────────────────


class TestCacheBust:
    def test_adds_loadtest_and_index(self):
        url = cache_bust(TARGET, 7)
        query = parse_qs(urlsplit(url).query)
        assert query["i"] == ["7"]
        assert len(query["loadtest"][0]) == 36
        assert url.startswith(TARGET + "?")

    def test_keeps_existing_query(self):
        url = cache_bust(TARGET + "?space=tlf", 1)
        assert parse_qs(urlsplit(url).query)["space"] == ["tlf"]

    def test_unique_per_call(self):
        assert cache_bust(TARGET, 1) != cache_bust(TARGET, 1)


# ── TabProvisioner ────────────────────────────────────────────────────────────


class TestTabProvisioner:
    def _provision(self, site, cfg, context, target=TARGET):
        return asyncio.run(TabProvisioner(context, site, cfg, target).provision())

    def test_opens_all_tabs_in_index_order(self, site, sleeps):
        cfg = BurstConfig(tabs=23, headless=True)
        context = FakeContext(_authed_page)

        handles = self._provision(site, cfg, context)
        assert [h.index for h in handles] == list(range(1, 24))
        assert all(h.ready for h in handles)
        assert len(context.opened) == 23
        assert handles[0].tab.prefix == "[tab 1/23]"

    def test_pauses_between_batches_only(self, site, sleeps):
        cfg = BurstConfig(tabs=23, headless=True, provision_batch_delay_s=7.5)
        self._provision(site, cfg, FakeContext(_authed_page))
        assert sleeps.count(7.5) == 2

    def test_each_tab_gets_cache_busted_url(self, site):
        cfg = BurstConfig(tabs=3, headless=True)
        context = FakeContext(_authed_page)
        self._provision(site, cfg, context)

        for n, page in enumerate(context.opened, 1):
            assert parse_qs(urlsplit(page.visits[0]).query)["i"] == [str(n)]

    def test_navigation_failure_is_recoverable(self, site):
        """One tab failing to load does not abort the others."""
        cfg = BurstConfig(tabs=3, headless=True)

        def factory(n):
            page = _authed_page(n)
            if n == 2:
                page.goto_error = "net::ERR_CONNECTION_RESET"
            return page

        handles = self._provision(site, cfg, FakeContext(factory))
        assert [h.ready for h in handles] == [True, False, True]
        assert handles[1].setup.kind is ErrorKind.RECOVERABLE
        assert handles[1].setup.reason == "navigation_failed"

    def test_branch_mode_falls_back_to_secondary_url(self, site):
        cfg = replace(BurstConfig(tabs=1, headless=True), create_branch=True)

        def factory(n):
            page = _authed_page(n)
            page.goto_error = lambda url: "timeout" if url.startswith(TARGET) else None
            return page

        context = FakeContext(factory)
        handles = self._provision(site, cfg, context)
        assert handles[0].ready
        assert handles[0].setup.reason == "fallback_url"
        assert context.opened[0].visits[1].startswith(site.fallback_url)

    def test_branch_mode_fallback_failure_is_recoverable(self, site):
        cfg = replace(BurstConfig(tabs=1, headless=True), create_branch=True)

        def factory(n):
            page = _authed_page(n)
            page.goto_error = "offline"
            return page

        handles = self._provision(site, cfg, FakeContext(factory))
        assert not handles[0].ready
        assert handles[0].setup.kind is ErrorKind.RECOVERABLE

    def test_default_mode_does_not_try_fallback(self, site):
        cfg = BurstConfig(tabs=1, headless=True)

        def factory(n):
            page = _authed_page(n)
            page.goto_error = "offline"
            return page

        context = FakeContext(factory)
        self._provision(site, cfg, context)
        assert len(context.opened[0].visits) == 1

    def test_page_open_failure_is_recoverable(self, site):
        """A new_page error marks only that tab as failed."""
        cfg = BurstConfig(tabs=3, headless=True)
        context = FakeContext(_authed_page, open_errors={2: "Target page, context or browser has been closed"})

        handles = self._provision(site, cfg, context)
        assert [h.index for h in handles] == [1, 2, 3]
        failed = [h for h in handles if not h.ready]
        assert len(failed) == 1
        assert failed[0].setup.kind is ErrorKind.RECOVERABLE
        assert failed[0].setup.reason == "page_open_failed"
        assert failed[0].tab.page is None
        assert failed[0].tab.url == ""
        assert len(context.opened) == 2
