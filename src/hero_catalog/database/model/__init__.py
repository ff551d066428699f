"""データベースモデルを一括エクスポートするモジュール.

新しいモデルを追加する際は、ここにインポート文を1行追加するだけで
create_tables が自動的に検出します。

Example:
-------
    新しいモデル `Team` を追加した場合:
    ```python
    from .team import Team
    ```

"""

from .hero import HeroRecord
from .user import UserAccount

__all__ = ["HeroRecord", "UserAccount"]
