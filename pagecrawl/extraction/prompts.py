"""Prompt templates for product extraction and keyword generation."""

from __future__ import annotations

from pagecrawl.models import PageContent

MAX_ITEMS = 5

EXTRACTION_PROMPT = """\
You are analyzing a landing page. Extract up to {max_items} distinct products OR articles \
that the page sells, features or publishes.

Step 1) Decide what kind of website {url} is: its claimed purpose and its content type.
Step 2) If it is a shopping website, extract the names of up to {max_items} distinct products, \
goods or services sold or featured on the page. Give each one 3-5 keywords for categorization.
Step 3) If it also presents articles or other content pieces, extract their titles. \
"article" must be one of the keywords of every article. Look for titles inside content \
containers, cards or list items, NOT page-level headers or navigation labels.

WHAT COUNTS:
- PRODUCTS: items for sale (physical goods, e-commerce items, services with prices).
- ARTICLES: blog posts, news, guides or other content with a title of its own.
- NOT NAMES: page-level navigation or section headers such as "Top Trending", \
"Latest Articles" or "Featured". These label the page, they are not content titles.

Only include names that actually appear on the page. If you cannot find any real \
product or article, return an empty array [].

URL: {url}
Page Title: {title}

Page Content:
{excerpt}

Return ONLY a JSON array. Each element is an object with:
- "name": the exact product/article name as written on the page.
- "keywords": 3-5 comma-separated keywords for categorization.

Exclude:
- Button text ("Quick add", "Quick view", "Browse All")
- Navigation or section headers ("Top trendings", "Latest articles", "Featured")
- Prices (a price is not a product name)
- Labels ("New arrival", "Product type")
- Non-product elements ("Contact Us", "Mastercard")
- Generic or placeholder names like "Product 1", "Item 2", "Article 3", "(not identified)", \
"unnamed", or the example values below
- Made-up or inferred names that do not appear on the page

Example of the expected format:
[
  {{"name": "product/articlename1", "keywords": "keyword1, keyword2, keyword3"}},
  {{"name": "product/articlename2", "keywords": "keyword1, keyword2, keyword3"}}
]"""

KEYWORD_PROMPT = """\
Given the following product information, generate up to 10 keywords that could be used \
for categorization. The keywords should describe the product type, category, features \
or use case.

Product Name: {name}
{description_line}
Return ONLY a JSON array of keywords (lowercase, single words or short 2-word phrases):
["keyword1", "keyword2", "keyword3"]"""


def build_extraction_prompt(page: PageContent) -> str:
    """Return the product/article extraction prompt for *page*."""
    return EXTRACTION_PROMPT.format(
        max_items=MAX_ITEMS,
        url=page.source_url,
        title=page.title or "(none)",
        excerpt=page.excerpt,
    )


def build_keyword_prompt(name: str, description: str = "") -> str:
    """Return the keyword-only prompt for a product name and optional description."""
    description_line = f"Description: {description}\n" if description else ""
    return KEYWORD_PROMPT.format(name=name, description_line=description_line)
