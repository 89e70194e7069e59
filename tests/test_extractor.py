from __future__ import annotations

from newsscraper.core.models import SelectorProfile
from newsscraper.scrape.dom import parse_html
from newsscraper.scrape.extractor import (
    extract_article,
    extract_author,
    extract_body,
    extract_generic,
    extract_image,
    extract_raw_date,
    extract_title,
    image_candidates,
)
from newsscraper.scrape.selectors import build_registry

URL = "https://site.com/news/1"


def _profile(**fields) -> SelectorProfile:
    base = {"article": ["article"], "title": [], "author": [], "date": [], "image": []}
    base.update(fields)
    return SelectorProfile.from_dict(base)


def test_title_last_matching_selector_wins():
    soup = parse_html('<p class="a">From A</p><p class="b">From B</p>')
    assert extract_title(soup, _profile(title=[".a", ".b"])) == "From B"
    # an empty later match does not clobber the earlier value
    soup = parse_html('<p class="a">From A</p><p class="b">   </p>')
    assert extract_title(soup, _profile(title=[".a", ".b"])) == "From A"


def test_title_heading_fallback_skips_empty():
    soup = parse_html("<h2>  </h2><div><h3>Second <b>Level</b></h3></div><h1>Later</h1>")
    assert extract_title(soup, _profile(title=[".missing"])) == "Second Level"


def test_author_last_match_and_meta_content():
    html = (
        '<meta name="author" content="Meta Person">'
        '<span class="byline">Byline Person</span>'
    )
    soup = parse_html(html)
    prof = _profile(author=[".byline", 'meta[name="author"]'])
    assert extract_author(soup, prof) == "Meta Person"
    prof = _profile(author=['meta[name="author"]', ".byline"])
    assert extract_author(soup, prof) == "Byline Person"


def test_author_defaults_to_unknown():
    soup = parse_html('<meta name="author" content=""><p>nothing</p>')
    assert extract_author(soup, _profile(author=['meta[name="author"]', ".author"])) == "Unknown"


def test_date_last_match_wins():
    soup = parse_html(
        '<span class="a">2020-01-01</span><meta property="article:published_time" '
        'content="2024-05-01T08:00:00Z">'
    )
    prof = _profile(date=[".a", 'meta[property="article:published_time"]'])
    assert extract_raw_date(soup, prof) == "2024-05-01T08:00:00Z"
    assert extract_raw_date(soup, _profile(date=[".none"])) == ""


def test_image_first_matching_selector_wins():
    soup = parse_html('<img class="x" src="/x.jpg"><img class="y" src="/y.jpg">')
    assert extract_image(soup, URL, _profile(image=[".x", ".y"])) == "https://site.com/x.jpg"
    assert extract_image(soup, URL, _profile(image=[".y", ".x"])) == "https://site.com/y.jpg"


def test_image_attribute_priority_and_validation():
    soup = parse_html(
        '<img src="data:image/gif;base64,AAAA" data-src="/icons/logo.svg" '
        'data-lazy-src="/page.html" data-original="/real.png?w=10" data-url="/other.jpg">'
    )
    assert extract_image(soup, URL, _profile(image=["img"])) == "https://site.com/real.png?w=10"


def test_image_srcset_candidate():
    soup = parse_html('<img data-srcset="/s-320.jpg 320w, /s-640.jpg 640w">')
    assert image_candidates(soup.img)[-1] == "/s-320.jpg"
    assert extract_image(soup, URL, _profile(image=["img"])) == "https://site.com/s-320.jpg"


def test_image_falls_back_to_any_img():
    soup = parse_html(
        '<img class="hero" src="/icon.svg"><img src="/spacer.gif.php"><img src="/lead.jpeg">'
    )
    assert extract_image(soup, URL, _profile(image=[".hero"])) == "https://site.com/lead.jpeg"
    assert extract_image(parse_html("<p>no images</p>"), URL, _profile(image=["img"])) is None


def test_body_strips_noise_without_touching_document():
    html = (
        '<div class="article-body">Lead text.<script>var x;</script>'
        '<div class="ad"><img src="/ad.jpg"></div><div class="related-articles">More</div></div>'
    )
    soup = parse_html(html)
    assert extract_body(soup) == "Lead text."
    assert soup.select_one(".ad img") is not None


def test_body_paragraph_fallback():
    soup = parse_html(
        "<article><p> One </p><p></p><p>Two</p></article><div class='story'><p>Three</p></div>"
        "<p>Outside</p>"
    )
    assert extract_body(soup) == "One\n\nTwo\n\nThree"
    assert extract_body(parse_html("<div>nothing here</div>")) is None


def test_extract_article_full_record():
    profile = build_registry().default
    html = (
        "<html><head><meta property='article:published_time' content='2024-05-01'></head>"
        "<body><article><h1>Big News</h1><span class='byline'>Ann Writer</span>"
        "<img class='featured-image' src='/img/lead.jpg'>"
        "<div class='story-body'><p>Paragraph.</p></div></article></body></html>"
    )
    rec = extract_article(html, URL, profile, source="site.com", now="NOW")
    assert rec is not None
    d = rec.to_dict()
    assert d == {
        "title": "Big News",
        "author": "Ann Writer",
        "date": "2024-05-01T00:00:00.000Z",
        "source": "site.com",
        "url": URL,
        "imageUrl": "https://site.com/img/lead.jpg",
        "content": "Paragraph.",
    }


def test_extract_article_fallbacks():
    profile = build_registry().default
    rec = extract_article("<h4>Only Heading</h4>", URL, profile, now="2000-01-01T00:00:00.000Z")
    assert rec is not None
    assert rec.author == "Unknown"
    assert rec.published_at == "2000-01-01T00:00:00.000Z"
    assert rec.source == "site.com"
    assert rec.image_url is None
    assert rec.body is None


def test_extract_article_without_title_is_dropped():
    profile = build_registry().default
    html = "<span class='author'>Someone</span><time>2024-05-01</time><img src='/a.jpg'>"
    assert extract_article(html, URL, profile) is None


def test_extract_generic():
    html = (
        "<html><head><title>Doc Title</title></head><body>"
        "<span itemprop='author'>Gen Author</span><span class='date'>May 1</span>"
        "<img src='/first.png'><p>One</p><p>Two</p></body></html>"
    )
    s = extract_generic(html, URL).to_dict()
    assert s == {
        "title": "Doc Title",
        "author": "Gen Author",
        "date": "May 1",
        "imageUrl": "https://site.com/first.png",
        "body": "One\n\nTwo",
        "url": URL,
    }


def test_extract_generic_prefers_article_text():
    html = "<h1>Head</h1><article> Inside </article><p>Outside</p>"
    s = extract_generic(html, URL)
    assert s.title == "Head"
    assert s.body == "Inside"
    assert s.author == "" and s.date == "" and s.image_url == ""
