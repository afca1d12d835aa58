"""LangGraph StateGraph for the initial generation: prototype and stories in parallel.

Both branches leave START in the same superstep and meet at END, so
``ainvoke`` returns only after both gateway calls have settled. An exception
in either branch propagates out of ``ainvoke``; no partial result is returned.

The gateway is passed per run through ``config["configurable"]["gateway"]``.
"""

from typing import TypedDict

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph

from poa.models import ImagePayload


class GenerationState(TypedDict, total=False):
    requirements: str  # Input text, may be blank when an image is given.
    image: ImagePayload | None
    ui_code: str  # Written by the prototype branch.
    stories_text: str  # Written by the stories branch, unparsed.


def _gateway(config: RunnableConfig):
    return config["configurable"]["gateway"]


async def prototype_node(state: GenerationState, config: RunnableConfig) -> dict:
    markup = await _gateway(config).generate_prototype(state["requirements"], state.get("image"))
    return {"ui_code": markup}


async def stories_node(state: GenerationState, config: RunnableConfig) -> dict:
    text = await _gateway(config).generate_stories(state["requirements"], state.get("image"))
    return {"stories_text": text}


# --- Build the graph ---

workflow = StateGraph(GenerationState)

workflow.add_node("prototype", prototype_node)
workflow.add_node("stories", stories_node)

workflow.add_edge(START, "prototype")
workflow.add_edge(START, "stories")
workflow.add_edge("prototype", END)
workflow.add_edge("stories", END)

graph = workflow.compile()


async def run_dual_generation(gateway, requirements: str, image: ImagePayload | None = None) -> GenerationState:
    """Run both branches with *gateway* and return the joined state."""
    return await graph.ainvoke(
        {"requirements": requirements, "image": image},
        config={"configurable": {"gateway": gateway}},
    )
