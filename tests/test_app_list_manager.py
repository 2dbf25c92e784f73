import unittest

from appshelf.core.app_list_manager import AppListManager
from appshelf.core.custom_app_store import CustomAppStore
from appshelf.core.errors import CatalogLoadError, DuplicateAppError, ManifestResolutionError
from appshelf.core.event_bus import EventBus, Events
from appshelf.core.local_storage import LocalStorage
from appshelf.core.pin_store import PinStore
from appshelf.models.app_entry import FetchStatus
from appshelf.sources.remote_catalog import StaticCatalogLoader

from tests.fixtures import CATALOG, DRAIN_SAFE, StaticResolver


class _Network:
    def __init__(self, value="4"):
        self.value = value

    def __call__(self):
        return self.value


def _build(catalog=None, custom=None, pins=None, resolver=None, network="4", loader=None):
    bus = EventBus()
    storage = LocalStorage()
    custom_store = CustomAppStore(storage, event_bus=bus)
    pin_store = PinStore(storage, event_bus=bus)
    if custom:
        storage.set_item("customSafeApps", custom)
    if pins:
        storage.set_item("pinnedSafeApps", pins)
    errors = []
    manager = AppListManager(
        catalog_loader=loader or StaticCatalogLoader(CATALOG if catalog is None else catalog),
        custom_store=custom_store,
        pin_store=pin_store,
        resolver=resolver or StaticResolver(),
        network_getter=_Network(network),
        event_bus=bus,
        error_logger=lambda code, detail: errors.append((code, detail)),
    )
    return manager, errors


class TestAppListManager(unittest.IsolatedAsyncioTestCase):
    async def test_pinned_apps_ignore_unknown_ids(self):
        manager, errors = _build(pins=["14", "24", "228"])
        await manager.refresh()
        self.assertEqual([e.name for e in manager.app_list], ["Compound", "ENS App", "Synthetix", "Transaction Builder"])
        self.assertEqual([e.name for e in manager.pinned_apps], ["Synthetix", "Transaction Builder"])
        # The unknown id stays stored.
        self.assertEqual(manager.pinned_ids, ["14", "24", "228"])
        self.assertEqual(errors, [])

    async def test_custom_apps_are_listed_separately(self):
        manager, _ = _build(custom=[DRAIN_SAFE])
        await manager.refresh()
        self.assertIn("Drain safe", [e.name for e in manager.app_list])
        self.assertEqual([e.name for e in manager.custom_apps], ["Drain safe"])

    async def test_custom_app_hidden_on_other_network(self):
        manager, _ = _build(custom=[DRAIN_SAFE], network="1")
        await manager.refresh()
        self.assertEqual(manager.custom_apps, [])

    async def test_is_loading_follows_catalog(self):
        seen = []

        def catalog(_network):
            seen.append(manager.is_loading)
            return CATALOG

        manager, _ = _build(loader=StaticCatalogLoader(factory=catalog))
        loaded = []
        manager.event_bus.subscribe(Events.CATALOG_LOADED, loaded.append)
        self.assertFalse(manager.is_loading)
        await manager.refresh()
        self.assertEqual(seen, [True])
        self.assertEqual(loaded, [{"count": 4}])
        self.assertFalse(manager.is_loading)
        self.assertEqual(manager.catalog_status, FetchStatus.SUCCESS)

    async def test_toggle_pin_is_symmetric(self):
        manager, _ = _build(pins=["14"])
        await manager.refresh()
        self.assertTrue(manager.toggle_pin("13"))
        self.assertEqual([e.name for e in manager.pinned_apps], ["Compound", "Synthetix"])
        self.assertFalse(manager.toggle_pin("13"))
        self.assertEqual(manager.pinned_ids, ["14"])
        self.assertEqual([e.name for e in manager.pinned_apps], ["Synthetix"])

    async def test_remove_app_recomputes_list(self):
        manager, _ = _build(custom=[DRAIN_SAFE])
        await manager.refresh()
        self.assertTrue(manager.remove_app("36"))
        self.assertNotIn("Drain safe", [e.name for e in manager.app_list])
        self.assertFalse(manager.remove_app("36"))

    async def test_unresolved_custom_app_gets_enriched(self):
        url = "https://legacy.example/app"
        manager, _ = _build(custom=[{"url": url}], resolver=StaticResolver({url: "Legacy"}))
        await manager.refresh()
        entry = next(e for e in manager.app_list if e.url == url)
        self.assertEqual(entry.fetch_status, FetchStatus.LOADING)
        await manager.wait_idle()
        entry = next(e for e in manager.app_list if e.url == url)
        self.assertEqual(entry.name, "Legacy")
        self.assertTrue(entry.custom)
        self.assertEqual(entry.fetch_status, FetchStatus.SUCCESS)

    async def test_add_custom_app(self):
        url = "https://new.example"
        manager, _ = _build(resolver=StaticResolver({url: "New App"}))
        await manager.refresh()
        added = await manager.add_custom_app(url + "/")
        self.assertEqual(added.url, url)
        self.assertTrue(added.custom)
        self.assertEqual([e.name for e in manager.custom_apps], ["New App"])
        with self.assertRaises(DuplicateAppError):
            await manager.add_custom_app(url)
        with self.assertRaises(DuplicateAppError):
            await manager.add_custom_app(CATALOG[0]["url"])

    async def test_add_custom_app_propagates_manifest_failure(self):
        manager, _ = _build()
        await manager.refresh()
        with self.assertRaises(ManifestResolutionError):
            await manager.add_custom_app("https://missing.example")
        self.assertEqual(manager.custom_apps, [])

    async def test_catalog_failure_is_logged_and_list_stays_empty(self):
        def broken(_network):
            raise CatalogLoadError("Catalog request failed with HTTP 503", 503)

        manager, errors = _build(custom=[DRAIN_SAFE], loader=StaticCatalogLoader(factory=broken))
        await manager.refresh()
        self.assertEqual(manager.catalog_status, FetchStatus.ERROR)
        self.assertEqual(manager.app_list, [])
        self.assertFalse(manager.sync())
        self.assertEqual(errors, [("CATALOG_LOAD_FAILED", "Catalog request failed with HTTP 503")])
        self.assertEqual(manager.snapshot()["catalogError"], "Catalog request failed with HTTP 503")

    async def test_network_change_rebuilds(self):
        def by_network(network):
            return [app for app in CATALOG if int(network) in app["chainIds"]]

        network = _Network("4")
        manager, _ = _build(custom=[DRAIN_SAFE], loader=StaticCatalogLoader(factory=by_network))
        manager._network_getter = network
        await manager.refresh()
        self.assertEqual(len(manager.app_list), 5)
        network.value = "56"
        await manager.network_changed()
        self.assertEqual([e.name for e in manager.app_list], ["Transaction Builder"])

    async def test_network_change_with_failed_catalog_drops_other_networks(self):
        def only_rinkeby(network):
            if network != "4":
                raise CatalogLoadError("Catalog request failed with HTTP 503", 503)
            return CATALOG

        network = _Network("4")
        manager, _ = _build(custom=[DRAIN_SAFE], loader=StaticCatalogLoader(factory=only_rinkeby))
        manager._network_getter = network
        await manager.refresh()
        network.value = "56"
        await manager.network_changed()
        self.assertEqual(manager.catalog_status, FetchStatus.ERROR)
        self.assertEqual([e.name for e in manager.app_list], ["Transaction Builder"])

    async def test_removal_after_failed_refresh_updates_list(self):
        responses = [CATALOG]

        def flaky(_network):
            if responses:
                return responses.pop()
            raise CatalogLoadError("Catalog request failed with HTTP 503", 503)

        manager, _ = _build(custom=[DRAIN_SAFE], loader=StaticCatalogLoader(factory=flaky))
        await manager.refresh()
        await manager.refresh()
        self.assertEqual(manager.catalog_status, FetchStatus.ERROR)
        self.assertTrue(manager.remove_app("36"))
        self.assertEqual(
            [e.name for e in manager.app_list],
            ["Compound", "ENS App", "Synthetix", "Transaction Builder"],
        )

    async def test_store_change_keeps_resolved_catalog_entries(self):
        url = "https://legacy.example/app"
        resolver = StaticResolver({url: "Legacy"})
        manager, _ = _build(catalog=CATALOG + [{"id": 50, "url": url, "chainIds": [4]}], resolver=resolver)
        await manager.refresh()
        await manager.wait_idle()

        manager.custom_store.set([DRAIN_SAFE])
        entry = next(e for e in manager.app_list if e.url == url)
        self.assertEqual(entry.name, "Legacy")
        self.assertEqual(entry.fetch_status, FetchStatus.SUCCESS)
        self.assertEqual(entry.id, "50")
        await manager.wait_idle()
        self.assertEqual(resolver.calls, [url])
        self.assertIn("Drain safe", [e.name for e in manager.app_list])

    async def test_search_runs_over_published_list(self):
        manager, _ = _build(custom=[DRAIN_SAFE])
        await manager.refresh()
        outcome = manager.search("Compound")
        self.assertEqual([e.name for e in outcome.results], ["Compound"])
        self.assertFalse(outcome.show_auxiliary_sections)
        self.assertEqual(len(manager.search("").results), 5)

    async def test_snapshot_shape(self):
        manager, _ = _build(custom=[DRAIN_SAFE], pins=["24"])
        await manager.refresh()
        snap = manager.snapshot()
        self.assertEqual(snap["network"], "4")
        self.assertEqual(len(snap["apps"]), 5)
        self.assertEqual([a["name"] for a in snap["customApps"]], ["Drain safe"])
        self.assertEqual([a["name"] for a in snap["pinnedApps"]], ["Transaction Builder"])
        self.assertFalse(snap["isLoading"])
        self.assertEqual(snap["catalogStatus"], "SUCCESS")
        self.assertIsNone(snap["catalogError"])


if __name__ == "__main__":
    unittest.main()
