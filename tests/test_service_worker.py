import pytest

from cepoka.constants.offline import CACHE_NAME, PRECACHE_URLS
from cepoka.offline.fetch import FetchRequest, NetworkError
from cepoka.offline.service_worker import InstallError, Registration, ServiceWorker, WorkerState


@pytest.fixture
def worker(caches, network):
    return ServiceWorker(caches, network)


@pytest.fixture
def active_worker(worker):
    worker.install()
    worker.activate()
    worker.network.calls.clear()
    return worker


def test_install_seeds_every_url(worker, caches, network):
    worker.install()

    assert worker.state is WorkerState.INSTALLED
    cache = caches.open(CACHE_NAME)
    for url in PRECACHE_URLS:
        key = network.resolve(url)
        assert cache.match(key).body == network.routes[key].body


def test_install_is_all_or_nothing_on_bad_status(worker, caches, network):
    network.add("/logo.png", status=404)

    with pytest.raises(InstallError):
        worker.install()

    assert worker.state is WorkerState.REDUNDANT
    assert caches.open(CACHE_NAME).keys() == []


def test_install_fails_when_seed_unreachable(worker, caches, network):
    network.unreachable.add(network.resolve("/manifest.json"))

    with pytest.raises(InstallError):
        worker.install()

    assert worker.state is WorkerState.REDUNDANT
    assert caches.match(network.resolve("/")) is None


def test_activate_requires_installed(worker):
    with pytest.raises(RuntimeError):
        worker.activate()


def test_activate_deletes_other_generations(worker, caches):
    caches.open("cepoka-cache-v0")
    caches.open("something-else")
    worker.install()

    deleted = worker.activate()

    assert sorted(deleted) == ["cepoka-cache-v0", "something-else"]
    assert caches.keys() == [CACHE_NAME]
    assert worker.state is WorkerState.ACTIVATED


def test_cache_hit_skips_network(active_worker, network):
    response = active_worker.handle_fetch(FetchRequest("/logo.png"))

    assert response.body == b"asset:/logo.png"
    assert network.calls == []


def test_miss_with_basic_200_is_cached(active_worker, network):
    network.add("/shop", body=b"shop page")

    first = active_worker.handle_fetch(FetchRequest("/shop"))
    second = active_worker.handle_fetch(FetchRequest("/shop"))

    assert first.body == second.body == b"shop page"
    assert network.calls == [network.resolve("/shop")]


def test_cache_write_goes_through_defer(active_worker, caches, network):
    network.add("/shop", body=b"shop page")
    deferred = []

    response = active_worker.handle_fetch(FetchRequest("/shop"), defer=lambda fn, *args: deferred.append((fn, args)))

    assert response.body == b"shop page"
    assert caches.match(network.resolve("/shop")) is None
    fn, args = deferred[0]
    fn(*args)
    assert caches.match(network.resolve("/shop")).body == b"shop page"


@pytest.mark.parametrize("status, type_", [(404, None), (500, None), (206, None), (200, "cors")])
def test_non_cacheable_responses_pass_through(active_worker, caches, network, status, type_):
    network.add("/thing", body=b"x", status=status, type=type_)
    before = caches.open(CACHE_NAME).keys()

    response = active_worker.handle_fetch(FetchRequest("/thing"))

    assert response.status == status
    assert caches.open(CACHE_NAME).keys() == before


def test_post_is_never_cached(active_worker, caches, network):
    network.add("/api/cart", body=b"ok")

    active_worker.handle_fetch(FetchRequest("/api/cart", method="POST"))

    assert caches.match(network.resolve("/api/cart")) is None


def test_navigation_offline_gets_offline_page(active_worker, network):
    network.offline = True

    response = active_worker.handle_fetch(FetchRequest("/shop", mode="navigate", destination="document"))

    assert response.body == b"<h1>You're offline</h1>"


def test_image_offline_gets_cached_logo(active_worker, network):
    network.add("/icons/sitelogo.png", body=b"PNGLOGO", headers={"Content-Type": "image/png"})
    active_worker.handle_fetch(FetchRequest("/icons/sitelogo.png", destination="image"))
    network.offline = True

    response = active_worker.handle_fetch(FetchRequest("/images/product-1.jpg", destination="image"))

    assert response.body == b"PNGLOGO"


def test_image_offline_without_cached_logo_is_408(active_worker, network):
    network.offline = True

    response = active_worker.handle_fetch(FetchRequest("/images/product-1.jpg", destination="image"))

    assert response.status == 408


def test_other_offline_is_synthetic_408(active_worker, network):
    network.offline = True

    response = active_worker.handle_fetch(FetchRequest("/api/products", destination=""))

    assert response.status == 408
    assert response.headers["Content-Type"] == "text/plain"
    assert response.text() == "Network error happened"


def test_registration_update_supersedes_previous(caches, network):
    registration = Registration(caches, network)
    old = registration.new_worker("cepoka-cache-v1")
    registration.update(old)

    new = registration.new_worker("cepoka-cache-v2")
    deleted = registration.update(new)

    assert deleted == ["cepoka-cache-v1"]
    assert registration.active is new
    assert old.state is WorkerState.REDUNDANT
    assert caches.keys() == ["cepoka-cache-v2"]


def test_registration_keeps_active_worker_when_install_fails(caches, network):
    registration = Registration(caches, network)
    current = registration.new_worker("cepoka-cache-v1")
    registration.update(current)
    network.add("/favicon.svg", status=500)

    with pytest.raises(InstallError):
        registration.update(registration.new_worker("cepoka-cache-v2"))

    assert registration.active is current
    assert current.state is WorkerState.ACTIVATED
    assert "cepoka-cache-v1" in caches.keys()


def test_uncontrolled_fetch_goes_to_network(caches, network):
    registration = Registration(caches, network)
    network.add("/shop", body=b"shop page")

    assert registration.handle_fetch(FetchRequest("/shop")).body == b"shop page"
    assert caches.keys() == []

    network.offline = True
    with pytest.raises(NetworkError):
        registration.handle_fetch(FetchRequest("/shop"))


@pytest.mark.parametrize("request_headers, response_headers", [
    ({"cookie": "session=alice"}, {}),
    ({"authorization": "Bearer abc"}, {}),
    ({}, {"Set-Cookie": "session=alice"}),
    ({}, {"Cache-Control": "private, max-age=60"}),
    ({}, {"cache-control": "no-store"}),
])
def test_user_specific_responses_are_not_cached(active_worker, caches, network, request_headers, response_headers):
    network.add("/account", body=b"mine", headers={"Content-Type": "text/html", **response_headers})

    response = active_worker.handle_fetch(FetchRequest("/account", headers=request_headers))

    assert response.body == b"mine"
    assert caches.match(network.resolve("/account")) is None


def test_public_response_cached_despite_max_age(active_worker, caches, network):
    network.add("/shop", body=b"shop", headers={"Content-Type": "text/html", "Cache-Control": "public, max-age=60"})

    active_worker.handle_fetch(FetchRequest("/shop"))

    assert caches.match(network.resolve("/shop")).body == b"shop"


def test_deferred_write_after_newer_version_activates_is_dropped(caches, network):
    registration = Registration(caches, network)
    registration.update(registration.new_worker("cepoka-cache-v1"))
    network.add("/shop", body=b"shop page")
    deferred = []

    registration.handle_fetch(FetchRequest("/shop"), defer=lambda fn, *args: deferred.append((fn, args)))
    registration.update(registration.new_worker("cepoka-cache-v2"))
    fn, args = deferred[0]
    fn(*args)

    assert caches.keys() == ["cepoka-cache-v2"]
    assert caches.match(network.resolve("/shop")) is None


def test_write_to_deleted_store_is_dropped_while_still_activated(active_worker, caches, network):
    network.add("/shop", body=b"shop page")
    deferred = []
    active_worker.handle_fetch(FetchRequest("/shop"), defer=lambda fn, *args: deferred.append((fn, args)))
    caches.delete(CACHE_NAME)

    fn, args = deferred[0]
    fn(*args)

    assert caches.keys() == []
