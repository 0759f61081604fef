# demo_client.py
import os
from concurrent.futures import ThreadPoolExecutor

import requests

BASE_URL = os.getenv("BOOK_API_URL", "http://localhost:3000")
TIMEOUT = 5

SAMPLE_ISBN = "9780061120084"
SAMPLE_AUTHOR = "Harper Lee"
SAMPLE_TITLE = "1984"


class BookClient:
    """
    Read-only client for the book review API.

    Every call returns a Future resolving to the decoded JSON body;
    non-2xx responses raise requests.HTTPError from .result().
    """

    def __init__(self, base_url=BASE_URL, timeout=TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self._executor = ThreadPoolExecutor(max_workers=1)

    def _get(self, path):
        resp = self.session.get(f"{self.base_url}{path}", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _submit(self, path):
        return self._executor.submit(self._get, path)

    def get_all_books(self):
        print("Fetching all books...")
        return self._submit("/books")

    def get_book_by_isbn(self, isbn):
        print(f'Searching book with ISBN "{isbn}"...')
        return self._submit(f"/books/isbn/{isbn}")

    def get_books_by_author(self, author):
        print(f'Searching books by author "{author}"...')
        return self._submit(f"/books/author/{author}")

    def get_books_by_title(self, title):
        print(f'Searching books by title "{title}"...')
        return self._submit(f"/books/title/{title}")

    def close(self):
        self._executor.shutdown(wait=True)
        self.session.close()


def first_title(body):
    books = list((body or {}).get("data") or {})
    if not books:
        return "N/A"
    return body["data"][books[0]].get("title") or "N/A"


def result_count(body):
    if "count" in body:
        return body["count"]
    return len(body.get("data") or {})


def run_demo(client):
    """
    Run the four lookups one after another, each awaited before the next.
    Returns True when all of them succeeded.
    """
    print("\n== Running Book API demo ==\n")

    # 1) All books. Nothing else is worth trying if this fails.
    try:
        body = client.get_all_books().result()
    except Exception as e:
        print(f"[ERROR] {e}")
        raise

    print(f"  Found {len(body.get('data') or {})} books")
    print(f"  Sample: {first_title(body)}")

    try:
        # 2) Exact ISBN
        body = client.get_book_by_isbn(SAMPLE_ISBN).result()
        print(f"  Found book: {first_title(body)}")

        # 3) Author search
        body = client.get_books_by_author(SAMPLE_AUTHOR).result()
        print(f"  Found {result_count(body)} book(s) by author")
        if first_title(body) != "N/A":
            print(f"  Sample: {first_title(body)}")

        # 4) Title search
        body = client.get_books_by_title(SAMPLE_TITLE).result()
        print(f"  Found {result_count(body)} book(s) by title")
        if first_title(body) != "N/A":
            print(f"  Sample: {first_title(body)}")
    except Exception as e:
        print(f"[ERROR] {e}")
        return False

    print("\nAll operations completed.\n")
    return True


def main():
    client = BookClient()
    try:
        run_demo(client)
    except requests.RequestException:
        print(f"\nAPI is not reachable at {client.base_url}. Make sure the server is running.")
    finally:
        client.close()


if __name__ == "__main__":
    main()
