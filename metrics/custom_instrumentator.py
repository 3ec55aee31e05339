from prometheus_fastapi_instrumentator import Instrumentator, metrics

instrumentator = Instrumentator(
    should_ignore_untemplated=True,      # /colleges/123 -> /colleges/{college_id}
    excluded_handlers=["/metrics", "/api/v1/health"],
    should_instrument_requests_inprogress=True,
    should_group_status_codes=False,
)

instrumentator.add(metrics.default(latency_lowr_buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5)))
instrumentator.add(metrics.request_size(should_include_handler=True, should_include_method=True))
instrumentator.add(metrics.response_size(should_include_handler=True, should_include_method=True))
