"""
Job processing core: runner forwarding, retry policy and the queue worker.
"""
