"""sitemap_crawler.parser: XML document parsers."""
