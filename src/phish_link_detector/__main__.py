from phish_link_detector.cli import main


if __name__ == "__main__":
    main()
