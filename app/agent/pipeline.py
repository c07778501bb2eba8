from datetime import datetime
from typing import TypedDict
from langgraph.graph import StateGraph, START, END
from app.agent.classifier import classify
from app.agent.router import TaskRouter
from app.domain.interfaces import TextGenerator
from app.domain.schemas import TaskRequest

class PipelineState(TypedDict, total=False):
    """State passed through the graph for one inbound task."""
    task: str               # raw text
    now: datetime           # reference time for relative dates
    advisory: str           # text-generation reply, informational only
    request: TaskRequest    # classification result
    routed: bool            # router returned without raising

def build_pipeline(text_gen: TextGenerator, router: TaskRouter):
    """
    Compile advise → classify → route.
    An exception in any node (e.g. TextGenerationError in advise) propagates
    out of invoke(), so later nodes never run.
    """

    def advise(state: PipelineState) -> PipelineState:
        return {"advisory": text_gen.process_command(state["task"])}

    def classify_task(state: PipelineState) -> PipelineState:
        return {"request": classify(state["task"], state["now"])}

    def route(state: PipelineState) -> PipelineState:
        router.dispatch(state["request"])
        return {"routed": True}

    graph = StateGraph(PipelineState)
    graph.add_node("advise", advise)
    graph.add_node("classify", classify_task)
    graph.add_node("route", route)
    graph.add_edge(START, "advise")
    graph.add_edge("advise", "classify")
    graph.add_edge("classify", "route")
    graph.add_edge("route", END)
    return graph.compile()
