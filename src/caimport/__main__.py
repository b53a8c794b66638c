# caimport/__main__.py

from caimport.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
