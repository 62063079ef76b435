from prometheus_client import Counter

NEWS_REQUESTS = Counter(
    "newsfeed_news_requests_total",
    "News requests by how they were answered",
    ["outcome"],
)
NEWS_UPSTREAM_CALLS = Counter(
    "newsfeed_news_upstream_calls_total",
    "Calls made to the news search API",
    ["status"],
)
LLM_COMPLETIONS = Counter(
    "newsfeed_llm_completions_total",
    "Language-model completions by feature and source",
    ["feature", "source"],
)
