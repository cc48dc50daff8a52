"""End-to-end notebook scenarios: build, run, edit, re-run."""

import httpx
import pytest

from cellgraph import CodeCell
from cellgraph import Executor
from cellgraph import Invalidator
from cellgraph import Scheduler
from cellgraph import TaskState
from cellgraph import build_tasks


class FakeScriptHost:
    def __init__(self):
        self.loaded = []

    async def load_script(self, url):
        self.loaded.append(url)


def _notebook():
    return build_tasks(
        variables={"A": 1, "B": 2},
        cells=[CodeCell("C", lambda a, b: a + b, inputs=("A", "B"))],
    )


class TestNotebookScenarios:
    """Scenarios mirroring how an editor drives the scheduler."""

    def test_sum_of_two_variables(self) -> None:
        store = _notebook()
        result = Scheduler().run(store)

        assert store["C"].value == 3
        assert result.completed[-1] == "C"
        assert all(task.state is TaskState.COMPLETE for task in store)

    def test_edit_then_rerun_recomputes_only_downstream(self) -> None:
        store = _notebook()
        scheduler = Scheduler()
        scheduler.run(store)

        reset = Invalidator(store).update("A", 5)
        result = scheduler.run(store)

        assert reset == ["A", "C"]
        assert sorted(result.completed) == ["A", "C"]
        assert store["B"].generation == 0
        assert store["C"].value == 7

    def test_document_with_data_scripts_and_cells(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"mass": 3750}, {"mass": 3800}])

        store = build_tasks(
            data={"penguins": "https://data.example/penguins.json"},
            scripts=["https://cdn.example/plot.js"],
            variables={"scale": 0.001},
            cells=[
                CodeCell(
                    "total_kg",
                    lambda rows, scale: sum(r["mass"] for r in rows) * scale,
                    inputs=("penguins", "scale"),
                ),
                CodeCell(
                    "chart",
                    lambda total, loaded: (loaded, round(total, 2)),
                    inputs=("total_kg", "scripts"),
                ),
            ],
        )
        host = FakeScriptHost()
        executor = Executor(
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), script_host=host
        )

        result = Scheduler(executor).run(store)

        assert result.quiesced
        assert host.loaded == ["https://cdn.example/plot.js"]
        assert store["chart"].value == ("scripts loaded", 7.55)

    def test_failed_download_stops_its_dependents(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        store = build_tasks(
            data={"rows": "https://data.example/rows.json"},
            variables={"label": "x"},
            cells=[CodeCell("count", len, inputs=("rows",))],
        )
        executor = Executor(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        with pytest.raises(httpx.HTTPStatusError):
            Scheduler(executor).run(store)

        assert store["rows"].state is TaskState.EXECUTING
        assert store["count"].state is TaskState.PENDING
