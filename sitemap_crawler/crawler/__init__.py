"""sitemap_crawler.crawler: sitemap resolution and concurrent page fetching."""
