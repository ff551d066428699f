"""ヒーロー同期モジュール."""
