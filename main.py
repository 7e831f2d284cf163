"""Entrypoint running the command-line interface."""

from switchtube_downloader import main


if __name__ == "__main__":
    main()
