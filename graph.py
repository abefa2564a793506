import logging
from typing import List, Tuple

from langgraph.graph import StateGraph, END
from state import QuoteBreakdown, QuoteState
from nodes.pricer import pricer_node
from nodes.aggregator import aggregator_node
from nodes.formatter import formatter_node
from nodes.validator import validator_node

logger = logging.getLogger(__name__)


def build_graph():
    workflow = StateGraph(QuoteState)

    # Add nodes
    workflow.add_node("pricer", pricer_node)
    workflow.add_node("aggregator", aggregator_node)
    workflow.add_node("formatter", formatter_node)
    workflow.add_node("validator", validator_node)

    # Define Edges
    workflow.set_entry_point("pricer")
    workflow.add_edge("pricer", "aggregator")
    workflow.add_edge("aggregator", "formatter")
    workflow.add_edge("formatter", "validator")
    workflow.add_edge("validator", END)

    return workflow.compile()


def calculate_total(quote: QuoteBreakdown) -> Tuple[QuoteBreakdown, str, List[str]]:
    """
    Runs the full "Calculate Total" pipeline on a form state.
    Returns the recalculated copy, the generated summary and any warnings.
    """
    app = build_graph()
    result = app.invoke({"quote": quote})
    return result["breakdown"], result.get("summary", ""), result.get("validation_errors", [])


if __name__ == "__main__":
    # Test compilation
    app = build_graph()
    print("Graph compiled successfully.")
    print(app.get_graph().draw_ascii())
