import re

from homesite.utils import (
    estimate_read_time,
    find_inline_media,
    generate_media_filename,
    make_excerpt,
    strip_markup,
)


def test_strip_markup_removes_html_tags():
    text = strip_markup('<p>Hello <strong>world</strong></p><script>alert(1)</script>')
    assert text == 'Hello world'


def test_strip_markup_removes_markdown_syntax():
    content = (
        '# Title\n\n'
        'Some **bold** and *italic* text with a [link](https://example.com).\n\n'
        '![cover](/uploads/cover.png)\n\n'
        '```python\nprint("hi")\n```\n'
        '> quoted `code`'
    )
    text = strip_markup(content)
    assert text == 'Title Some bold and italic text with a link. quoted code'


def test_strip_markup_keeps_snake_case_and_entities():
    assert strip_markup('use my_variable &amp; a < b') == 'use my_variable & a < b'


def test_excerpt_is_untouched_when_short():
    assert make_excerpt('Short post', 200) == 'Short post'


def test_excerpt_is_truncated_prefix_with_ellipsis():
    content = '<p>' + 'word ' * 100 + '</p>'
    excerpt = make_excerpt(content, 50)
    assert excerpt.endswith('...')
    assert strip_markup(content).startswith(excerpt[:-3])
    assert len(excerpt) <= 53


def test_read_time_rounds_up():
    assert estimate_read_time('x' * 1200, 300) == '4 min'
    assert estimate_read_time('x' * 1201, 300) == '5 min'
    assert estimate_read_time('x', 300) == '1 min'


def test_read_time_is_monotonic_in_length():
    minutes = [int(estimate_read_time('x' * n, 300).split()[0]) for n in range(1, 2000, 37)]
    assert minutes == sorted(minutes)


def test_find_inline_media_prefers_image():
    content = '<video src="/v.mp4"></video> ![alt](/a.png)'
    assert find_inline_media(content) == ('image', '/a.png')
    assert find_inline_media('<video controls src="/v.mp4"></video>') == ('video', '/v.mp4')
    assert find_inline_media('no media') is None


def test_generated_filenames_use_type_extension_and_differ():
    extensions = {'image/jpeg': 'jpg'}
    first = generate_media_filename('image/jpeg', extensions)
    second = generate_media_filename('image/jpeg', extensions)
    assert re.fullmatch(r'\d+-[0-9a-f]{8}\.jpg', first)
    assert first != second


def test_generated_filename_falls_back_to_guessed_extension():
    assert generate_media_filename('video/mp4').endswith('.mp4')


def test_naive_datetimes_are_treated_as_utc():
    from datetime import datetime

    from homesite.utils import isoformat

    assert isoformat(datetime(2024, 1, 1, 12, 0), 'Asia/Taipei') == '2024-01-01T20:00:00+08:00'
    assert isoformat(None) is None
