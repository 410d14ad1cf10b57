"""
Mutation testing configuration for mutmut.

Mutates src/sequtils and skips code whose mutations tests cannot observe.
"""


def pre_mutation(context):
    """
    Hook called before each mutation.

    Skips tests, package __init__ files, logging calls and docstrings.
    """
    if 'tests/' in context.filename:
        context.skip = True

    if context.filename.endswith('__init__.py'):
        context.skip = True

    line = context.current_source_line.strip()
    if line.startswith('logger.') or line.startswith('logging.'):
        context.skip = True

    # Histogram bucket edges are never asserted on
    if context.filename.endswith('parallel/metrics.py'):
        if line.startswith('buckets='):
            context.skip = True

    # The executor queue depth only changes throughput
    if line.startswith('_QUEUE_DEPTH_PER_WORKER ='):
        context.skip = True

    if '"""' in line or "'''" in line:
        context.skip = True
