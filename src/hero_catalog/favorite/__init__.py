"""お気に入りモジュール."""
