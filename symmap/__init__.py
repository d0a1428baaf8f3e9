"""C宣言からバインディング名を解決するシンボルマッパー。"""

__version__ = "0.1.0"
