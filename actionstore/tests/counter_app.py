"""
Counter store definition used by the CLI tests.
"""

import asyncio


def increment(ctx, n=1):
    """Add n to the counter."""
    return {"count": ctx.state()["count"] + n}


async def add_later(ctx, n):
    """Add n after yielding to the event loop."""
    await asyncio.sleep(0)
    return {"count": ctx.state()["count"] + n}


def count_up(ctx, times=3):
    """Commit one increment per step."""
    for _ in range(times):
        yield {"count": ctx.state()["count"] + 1}


async def count_down(ctx, times=2):
    for _ in range(times):
        yield {"count": ctx.state()["count"] - 1}


def fail(ctx):
    """Always raises."""
    raise RuntimeError("boom")


actions = {
    "increment": increment,
    "add_later": add_later,
    "count_up": count_up,
    "count_down": count_down,
    "fail": fail,
}


def initial_state(actions):
    return {"count": 0}


middlewares = [
    {"type": "pre", "method": lambda ctx: None, "meta": {"source": "counter_app"}},
]
