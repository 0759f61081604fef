"""
Property-based tests for catalog search and insert.

- Author/title search matches case-insensitive substrings and nothing else.
- A fresh ISBN added to the store reads back as the same record.
"""
from hypothesis import assume, given, settings, strategies as st

from catalog_service.stores import BookStore

# keep to ASCII so lower() round-trips cleanly
text_strategy = st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126), max_size=30)

book_strategy = st.fixed_dictionaries({"title": text_strategy, "author": text_strategy})

catalog_strategy = st.dictionaries(
    keys=st.text(alphabet="0123456789", min_size=10, max_size=13),
    values=book_strategy,
    max_size=15,
)


def make_store(catalog):
    books = {isbn: dict(book, isbn=isbn) for isbn, book in catalog.items()}
    return BookStore("unused.json", books)


@settings(max_examples=100)
@given(catalog=catalog_strategy, needle=text_strategy)
def test_author_search_is_case_insensitive_substring(catalog, needle):
    store = make_store(catalog)
    result = store.search_by_author(needle)

    expected = {
        isbn for isbn, book in catalog.items() if needle.lower() in book["author"].lower()
    }
    assert set(result) == expected
    assert result == store.search_by_author(needle.upper())


@settings(max_examples=100)
@given(catalog=catalog_strategy, needle=text_strategy)
def test_title_search_is_case_insensitive_substring(catalog, needle):
    store = make_store(catalog)
    expected = {
        isbn for isbn, book in catalog.items() if needle.lower() in book["title"].lower()
    }
    assert set(store.search_by_title(needle)) == expected


@settings(max_examples=50)
@given(catalog=catalog_strategy, book=book_strategy, isbn=st.text(alphabet="0123456789X", min_size=1, max_size=13))
def test_added_book_reads_back(catalog, book, isbn):
    store = make_store(catalog)
    assume(isbn not in store)
    store.save = lambda: None

    record = dict(book, isbn=isbn)
    store.add(record)
    assert store.get(isbn) == record
