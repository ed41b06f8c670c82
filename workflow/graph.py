"""LangGraph StateGraph: the chapter pipeline behind generate and twist."""

import logging
from dataclasses import replace

from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, START, END

from config.exceptions import LLMError
from workflow.conditions import route_entry, route_after_rewrite, route_after_write
from workflow.state import ChapterWorkflowState, NovelStore

logger = logging.getLogger(__name__)

# User-visible messages, one per operation
OUTLINE_ERROR_MESSAGE = "حدث خطأ أثناء توليد مخطط الرواية. يرجى التأكد من المفتاح البرمجي أو المحاولة مرة أخرى."
CHAPTER_ERROR_MESSAGE = "فشل في توليد الفصل. حاول مرة أخرى."
TWIST_ERROR_MESSAGE = "فشل في إضافة الحبكة. حاول مرة أخرى."
AUDIO_ERROR_MESSAGE = "حدث خطأ أثناء توليد الصوت. يرجى المحاولة مرة أخرى."


def _resources(config: RunnableConfig):
    """Return (store, client, callback) handed in through the run config."""
    configurable = config.get("configurable", {})
    return configurable["store"], configurable["client"], configurable.get("callback")


def _notify_chapter(callback, index: int, chapter) -> None:
    if callback is not None:
        callback.on_chapter_update(index, chapter)


# ---------------------------------------------------------------------------
# Node functions
# ---------------------------------------------------------------------------

async def rewrite_summary(state: ChapterWorkflowState, config: RunnableConfig) -> dict:
    """Ask for a twisted summary and apply it to the store right away."""
    logger.info("Entering node: rewrite_summary")
    store, client, callback = _resources(config)
    index = state["index"]
    premise = store.require_novel().premise
    chapter = store.chapter(index)

    try:
        new_summary = await client.generate_twist(premise, chapter, state.get("context_prompt", ""))
    except LLMError as e:
        return {"error": f"Twist failed: {e}", "last_node": "rewrite_summary"}
    except Exception as e:
        logger.exception("Unexpected twist failure for chapter %d", chapter.id)
        return {"error": f"Twist failed: {e}", "last_node": "rewrite_summary"}

    # Land the new idea now so a failed rewrite of the prose does not lose it
    updated = store.update_chapter(index, summary=new_summary)
    _notify_chapter(callback, index, updated)

    return {"summary": new_summary, "last_node": "rewrite_summary"}


async def write_content(state: ChapterWorkflowState, config: RunnableConfig) -> dict:
    """Generate the chapter prose from the current summary."""
    logger.info("Entering node: write_content")
    store, client, _ = _resources(config)
    index = state["index"]
    premise = store.require_novel().premise
    chapter = store.chapter(index)
    summary = state.get("summary") or chapter.summary

    try:
        content = await client.generate_chapter_content(
            premise,
            replace(chapter, summary=summary),
            state.get("context_prompt", ""),
        )
    except LLMError as e:
        return {"error": f"Chapter generation failed: {e}", "last_node": "write_content"}
    except Exception as e:
        logger.exception("Unexpected generation failure for chapter %d", chapter.id)
        return {"error": f"Chapter generation failed: {e}", "last_node": "write_content"}

    return {"summary": summary, "content": content, "last_node": "write_content"}


async def save_chapter(state: ChapterWorkflowState, config: RunnableConfig) -> dict:
    """Store summary and content together and clear the in-flight flag."""
    logger.info("Entering node: save_chapter")
    store, _, callback = _resources(config)
    index = state["index"]

    chapter = store.update_chapter(
        index,
        summary=state.get("summary"),
        content=state.get("content"),
        is_generating=False,
    )
    store.clear_error()
    _notify_chapter(callback, index, chapter)

    logger.info("Chapter %d saved (%s)", chapter.id, state.get("mode", "generate"))
    return {"last_node": "save_chapter"}


async def handle_error(state: ChapterWorkflowState, config: RunnableConfig) -> dict:
    """Clear the flag, keep any summary that already landed, surface the message."""
    logger.info("Entering node: handle_error")
    store, _, callback = _resources(config)
    index = state["index"]
    mode = state.get("mode", "generate")

    logger.error("Chapter pipeline error (%s, index %d): %s", mode, index, state.get("error"))

    chapter = store.update_chapter(index, is_generating=False)
    message = TWIST_ERROR_MESSAGE if mode == "twist" else CHAPTER_ERROR_MESSAGE
    store.set_error(message)
    _notify_chapter(callback, index, chapter)
    if callback is not None:
        callback.on_error(mode, message)

    return {"last_node": "handle_error"}


# ---------------------------------------------------------------------------
# Graph construction
# ---------------------------------------------------------------------------

def build_chapter_graph():
    """Build and return the compiled chapter pipeline."""
    graph = StateGraph(ChapterWorkflowState)

    graph.add_node("rewrite_summary", rewrite_summary)
    graph.add_node("write_content", write_content)
    graph.add_node("save_chapter", save_chapter)
    graph.add_node("handle_error", handle_error)

    # Entry: twist -> rewrite_summary, generate -> write_content
    graph.add_conditional_edges(
        START,
        route_entry,
        {
            "rewrite_summary": "rewrite_summary",
            "write_content": "write_content",
        },
    )

    graph.add_conditional_edges(
        "rewrite_summary",
        route_after_rewrite,
        {
            "write_content": "write_content",
            "handle_error": "handle_error",
        },
    )

    graph.add_conditional_edges(
        "write_content",
        route_after_write,
        {
            "save_chapter": "save_chapter",
            "handle_error": "handle_error",
        },
    )

    graph.add_edge("save_chapter", END)
    graph.add_edge("handle_error", END)

    return graph.compile()


async def run_chapter_pipeline(
    app,
    index: int,
    mode: str,
    context_prompt: str,
    store: NovelStore,
    client,
    callback=None,
) -> dict:
    """Run one pass of the compiled pipeline for chapter ``index``.

    Returns:
        Final pipeline state dict.
    """
    initial_state: ChapterWorkflowState = {
        "index": index,
        "mode": mode,
        "context_prompt": context_prompt,
        "error": "",
    }
    config: RunnableConfig = {
        "configurable": {"store": store, "client": client, "callback": callback},
    }

    logger.info("Starting chapter pipeline: mode=%s, index=%d", mode, index)
    final_state = await app.ainvoke(initial_state, config=config)
    logger.info("Chapter pipeline finished: last_node=%s", final_state.get("last_node"))
    return final_state
