from catalog.models.author import Author
from catalog.models.book import Book
from catalog.models.user import User

__all__ = ["Author", "Book", "User"]
