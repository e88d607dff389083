from errors import EnumerationFailed, IncompatibleNativeLibrary
from host import immediate_scheduler
from models import CaptureOptions, Node
from node_catalog import CatalogState, ListResult, NodeCatalog


class Lister:
    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.options = []

    def list(self, options):
        self.options.append(options)
        if self.exc is not None:
            raise self.exc
        return self.result


def test_pending_until_scheduler_runs():
    nodes = [Node(name="Firefox")]
    cat = NodeCatalog(Lister(ListResult(ok=True, nodes=nodes, has_compat_layer=False)))
    queued = []

    cat.load(lambda ms, cb: queued.append(cb), CaptureOptions())

    assert cat.state == CatalogState.PENDING
    assert cat.loading
    assert cat.nodes == []
    assert cat.has_compat_layer is True

    queued[0]()

    assert cat.state == CatalogState.READY
    assert cat.nodes == nodes
    assert cat.has_compat_layer is False
    assert cat.error is None


def test_on_done_is_called_and_options_forwarded():
    lister = Lister(ListResult(ok=True))
    cat = NodeCatalog(lister)
    done = []
    opts = CaptureOptions(ignore_inputs=False)

    cat.load(immediate_scheduler, opts, done.append)

    assert done == [cat]
    assert lister.options == [opts]


def test_generic_failure_is_enumeration_failed():
    cat = NodeCatalog(Lister(exc=RuntimeError("pw-dump failed: connection refused")))

    cat.load(immediate_scheduler, CaptureOptions())

    assert cat.state == CatalogState.FAILED
    assert isinstance(cat.error, EnumerationFailed)
    assert not cat.incompatible_library
    assert "connection refused" in str(cat.error)
    assert cat.nodes == []


def test_incompatible_library_is_distinct():
    cat = NodeCatalog(Lister(exc=IncompatibleNativeLibrary("GLIBCXX_3.4.32 not found")))

    cat.load(immediate_scheduler, CaptureOptions())

    assert cat.state == CatalogState.FAILED
    assert cat.incompatible_library
    assert cat.error.guide_url.startswith("https://")


def test_not_ok_result_is_a_failure():
    cat = NodeCatalog(Lister(ListResult(ok=False, incompatible_library=True)))

    cat.load(immediate_scheduler, CaptureOptions())

    assert cat.state == CatalogState.FAILED
    assert cat.incompatible_library
    assert cat.has_compat_layer is True
