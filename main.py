# main.py

from planeta_agua.server import run

if __name__ == "__main__":
    run()
