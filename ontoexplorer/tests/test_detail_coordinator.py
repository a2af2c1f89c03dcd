import asyncio

import pytest

from ontoexplorer.detail.coordinator import DETAIL_ERROR_MESSAGE
from ontoexplorer.errors import NotFound, TransportError
from ontoexplorer.state import ViewState


class TestDetailLoad:
    """Test loading an element's detail and relations together."""

    @pytest.mark.asyncio
    async def test_detail_and_graph_rendered_together(self, explorer, fake_api, surface):
        await explorer.detail.load("GeneExpression")

        assert surface.detail.name == "GeneExpression"
        assert [n.name for n in surface.graph.nodes] == ["GeneExpression", "Process", "Transcription"]
        assert len(surface.graph.edges) == 3
        assert len(surface.contexts) == 1
        kinds = [kind for kind, _ in surface.events]
        assert kinds.index("detail") < kinds.index("graph")
        assert explorer.state.view_state is ViewState.DETAIL_SHOWN

    @pytest.mark.asyncio
    async def test_requests_run_concurrently(self, explorer, fake_api, surface):
        detail_gate = fake_api.hold("detail", "GeneExpression")

        task = explorer.detail.load("GeneExpression")
        await asyncio.sleep(0.01)

        assert fake_api.calls_of("detail") == ["GeneExpression"]
        assert fake_api.calls_of("relations") == ["GeneExpression"]
        assert surface.detail is None
        assert surface.graph is None

        detail_gate.set()
        await task
        assert surface.detail.name == "GeneExpression"

    @pytest.mark.asyncio
    async def test_nothing_rendered_until_both_settle(self, explorer, fake_api, surface):
        relations_gate = fake_api.hold("relations", "GeneExpression")

        task = explorer.detail.load("GeneExpression")
        await asyncio.sleep(0.01)
        assert surface.detail is None

        relations_gate.set()
        await task
        assert surface.detail.name == "GeneExpression"
        assert surface.graph.focus.name == "GeneExpression"

    @pytest.mark.asyncio
    async def test_no_relations_gives_focus_only_graph(self, explorer, surface):
        await explorer.detail.load("Gene")

        assert [n.name for n in surface.graph.nodes] == ["Gene"]
        assert surface.graph.edges == []


class TestDetailFailures:
    """Test how failures of either request are handled."""

    @pytest.mark.asyncio
    async def test_relations_failure_degrades_to_no_relations(self, explorer, fake_api, surface):
        fake_api.fail("relations", "GeneExpression", TransportError("HTTP 500", status=500))

        await explorer.detail.load("GeneExpression")

        assert surface.errors == []
        assert surface.detail.name == "GeneExpression"
        assert len(surface.graph.nodes) == 1

    @pytest.mark.asyncio
    async def test_relations_not_found_is_absorbed(self, explorer, fake_api, surface):
        fake_api.fail("relations", "GeneExpression", NotFound("no relations"))

        await explorer.detail.load("GeneExpression")

        assert surface.errors == []
        assert surface.graph.edges == []

    @pytest.mark.asyncio
    async def test_detail_failure_keeps_previous_pane(self, explorer, fake_api, surface):
        await explorer.detail.load("Gene")
        fake_api.fail("detail", "GeneFamily", TransportError("timeout"))

        await explorer.detail.load("GeneFamily")

        assert surface.errors == [DETAIL_ERROR_MESSAGE]
        assert surface.detail.name == "Gene"
        assert surface.graph.focus.name == "Gene"
        assert not surface.loading_visible
        assert explorer.state.view_state is ViewState.ERROR
        assert explorer.dismiss_error() is ViewState.DETAIL_SHOWN

    @pytest.mark.asyncio
    async def test_loading_released_when_an_unexpected_error_escapes(self, explorer, fake_api, surface):
        fake_api.fail("detail", "Gene", RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await explorer.detail.load("Gene")

        assert explorer.state.loading_count == 0
        assert not surface.loading_visible


class TestDetailStaleness:
    """Test that an older load never overwrites a newer one."""

    @pytest.mark.asyncio
    async def test_slow_older_load_is_discarded(self, explorer, fake_api, surface):
        gate = fake_api.hold("detail", "Gene")

        older = explorer.detail.load("Gene")
        newer = explorer.detail.load("GeneExpression")
        await newer
        assert surface.detail.name == "GeneExpression"

        gate.set()
        await older

        assert surface.detail.name == "GeneExpression"
        assert surface.graph.focus.name == "GeneExpression"
        assert surface.events.count(("detail", "Gene")) == 0

    @pytest.mark.asyncio
    async def test_older_failure_does_not_report(self, explorer, fake_api, surface):
        gate = fake_api.hold("detail", "Gene")
        fake_api.fail("detail", "Gene", TransportError("timeout"))

        older = explorer.detail.load("Gene")
        await explorer.detail.load("GeneExpression")
        gate.set()
        await older

        assert surface.errors == []
        assert surface.detail.name == "GeneExpression"


class TestLoadingIndicator:
    """Test the reference-counted loading indicator."""

    @pytest.mark.asyncio
    async def test_indicator_hidden_only_when_last_operation_settles(self, explorer, fake_api, surface):
        search_gate = fake_api.hold("search", "gene")
        detail_gate = fake_api.hold("detail", "Gene")

        search = explorer.perform_search("gene")
        load = explorer.detail.load("Gene")
        await asyncio.sleep(0.01)
        assert explorer.state.loading_count == 2
        assert surface.loading_shown == 1

        detail_gate.set()
        await load
        assert surface.loading_visible
        assert explorer.state.is_loading

        search_gate.set()
        await search
        assert not surface.loading_visible
        assert explorer.state.loading_count == 0
