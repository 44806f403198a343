"""
Workers module.

Long-polling consumer for the job work queue.

Dependencies: runner_gateway.core.job_processing
System role: Background task processing
"""
