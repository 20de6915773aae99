"""`python -m endurance` — discover modules in the current directory and serve them."""

from endurance.main import main

if __name__ == "__main__":
    main()
