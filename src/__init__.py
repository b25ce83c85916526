"""seosync: SEO metadata synchronization for hosted storefront content.

Reads products, pages and blog articles from the Shopify Admin GraphQL API
and writes SEO title/description updates back through the same API.
"""

__version__ = "0.1.0"
