from __future__ import annotations

from funding_feeds.markup import (
    extract_date_blocks,
    extract_items,
    get_cdata_or_tag,
    get_tag,
    html_to_text,
    normalize_text,
    parse_feed_items,
)

FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Calls</title>
    <item>
      <title><![CDATA[LIFE call &amp; info]]></title>
      <link>https://cinea.ec.europa.eu/calls/life-2026_en</link>
      <description><![CDATA[<p>Open until 15 April 2026</p>]]></description>
      <pubDate>Tue, 06 Jan 2026 10:00:00 +0100</pubDate>
      <guid isPermaLink="false">12345</guid>
    </item>
    <item>
      <title>Plain title</title>
      <description>&lt;p&gt;Escaped &amp;amp; markup&lt;/p&gt;</description>
    </item>
  </channel>
</rss>
"""


def test_extract_items_returns_every_item_block() -> None:
    blocks = extract_items(FEED)

    assert len(blocks) == 2
    assert "LIFE call" in blocks[0]
    assert extract_items("<rss><channel></channel></rss>") == []


def test_cdata_is_preferred_over_plain_tag() -> None:
    block = "<title>plain</title><title><![CDATA[wrapped]]></title>"

    assert get_cdata_or_tag(block, "title") == "wrapped"
    assert get_tag(block, "title") == "plain"
    assert get_cdata_or_tag("<link>https://x.test</link>", "link") == "https://x.test"
    assert get_tag("<item></item>", "pubDate") == ""


def test_parse_feed_items_decodes_fields_and_honours_limit() -> None:
    items = parse_feed_items(FEED)

    assert items[0].title == "LIFE call & info"
    assert items[0].link == "https://cinea.ec.europa.eu/calls/life-2026_en"
    assert items[0].guid == "12345"
    assert items[0].pub_date == "Tue, 06 Jan 2026 10:00:00 +0100"
    assert html_to_text(items[0].description) == "Open until 15 April 2026"

    assert items[1].link == ""
    assert items[1].description == "<p>Escaped &amp; markup</p>"
    assert html_to_text(items[1].description) == "Escaped & markup"

    assert len(parse_feed_items(FEED, limit=1)) == 1


def test_html_to_text_keeps_line_structure() -> None:
    fragment = (
        "<p>Call  for\tproposals</p><p></p>"
        "<ul><li>Budget: &euro;5m</li><li>Deadline:<br/>15 April 2026</li></ul>"
        "<div>Tom &quot;&amp;&quot; Jerry&#39;s &#039;fund&#039; &lt;2026&gt;</div>"
    )

    assert html_to_text(fragment) == "\n".join(
        [
            "Call for proposals",
            "Budget: €5m",
            "Deadline:",
            "15 April 2026",
            "Tom \"&\" Jerry's 'fund' <2026>",
        ]
    )


def test_normalize_text_collapses_to_one_line() -> None:
    assert normalize_text("<span>\n  02-06 \n</span>") == "02-06"
    assert normalize_text("a&nbsp;&nbsp;b<br>c") == "a b c"
    assert normalize_text("") == ""


def test_date_blocks_need_the_events_anchor() -> None:
    page = '<span class="ecl-date-block__day">17</span>'

    assert extract_date_blocks(page) == []


def test_date_blocks_tolerate_missing_parts() -> None:
    page = (
        '<div ID="block-eventsglobal">'
        '<span class="ecl-date-block__day"> 17 </span>'
        '<span class="ecl-date-block__year">2026</span>'
        '<a href="/news-events/events/day_en">Partner day</a>'
        "</div>"
    )

    blocks = extract_date_blocks(page)

    assert len(blocks) == 1
    assert blocks[0].day == "17"
    assert blocks[0].month == ""
    assert blocks[0].year == "2026"
    assert blocks[0].href == "/news-events/events/day_en"
    assert blocks[0].title == "Partner day"


def test_date_blocks_ignore_content_before_anchor() -> None:
    page = (
        '<span class="ecl-date-block__day">01</span>'
        '<div id="block-eventsglobal">'
        '<span class="ecl-date-block__day">05</span>'
        '<abbr class="ecl-date-block__month">Jun</abbr>'
        "</div>"
    )

    blocks = extract_date_blocks(page)

    assert [block.day for block in blocks] == ["05"]
    assert blocks[0].month == "Jun"
    assert blocks[0].href == ""


def test_date_blocks_anchor_offset_survives_case_expanding_text() -> None:
    # "İ" lowercases to two code points
    page = (
        "<p>" + "İ" * 300 + "</p>"
        '<div id="block-eventsglobal">'
        '<span class="ecl-date-block__day">09</span>'
        '<abbr class="ecl-date-block__month">Apr</abbr>'
        '<span class="ecl-date-block__year">2026</span>'
        "</div>"
    )

    blocks = extract_date_blocks(page)

    assert [(block.day, block.month, block.year) for block in blocks] == [("09", "Apr", "2026")]
