"""Canonical GraphQL query/mutation strings for the Shopify Admin API."""

# Connection reads. Each takes $first and an optional $after cursor and
# selects pageInfo so callers can follow cursors.

QUERY_PRODUCTS = """
query getProducts($first: Int!, $after: String) {
  products(first: $first, after: $after) {
    edges {
      node {
        id
        title
        handle
        description
        seo { title description }
        images(first: 1) {
          edges { node { url } }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

QUERY_PAGES = """
query getPages($first: Int!, $after: String) {
  pages(first: $first, after: $after) {
    edges {
      node {
        id
        title
        handle
        body
        seoTitle: metafield(namespace: "global", key: "title_tag") { value }
        seoDescription: metafield(namespace: "global", key: "description_tag") { value }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

QUERY_BLOGS = """
query getBlogs($first: Int!, $after: String) {
  blogs(first: $first, after: $after) {
    edges {
      node {
        id
        title
        handle
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

QUERY_ARTICLES = """
query getArticles($blogId: ID!, $first: Int!, $after: String) {
  blog(id: $blogId) {
    articles(first: $first, after: $after) {
      edges {
        node {
          id
          title
          handle
          summary
          seoTitle: metafield(namespace: "global", key: "title_tag") { value }
          seoDescription: metafield(namespace: "global", key: "description_tag") { value }
        }
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

QUERY_THEMES = """
query getThemes($first: Int!) {
  themes(first: $first) {
    edges {
      node {
        id
        name
        role
        previewUrl
        createdAt
      }
    }
  }
}
"""

# SEO mutations. Products have a first-class seo input; pages and
# articles store SEO in the global title_tag/description_tag metafields.

MUTATION_PRODUCT_SEO = """
mutation productUpdate($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
      seo { title description }
    }
    userErrors { field message }
  }
}
"""

MUTATION_PAGE_SEO = """
mutation pageUpdate($id: ID!, $page: PageUpdateInput!) {
  pageUpdate(id: $id, page: $page) {
    page {
      id
      seoTitle: metafield(namespace: "global", key: "title_tag") { value }
      seoDescription: metafield(namespace: "global", key: "description_tag") { value }
    }
    userErrors { field message }
  }
}
"""

MUTATION_ARTICLE_SEO = """
mutation articleUpdate($id: ID!, $article: ArticleUpdateInput!) {
  articleUpdate(id: $id, article: $article) {
    article {
      id
      seoTitle: metafield(namespace: "global", key: "title_tag") { value }
      seoDescription: metafield(namespace: "global", key: "description_tag") { value }
    }
    userErrors { field message }
  }
}
"""
