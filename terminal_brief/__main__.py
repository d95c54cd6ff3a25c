from terminal_brief.cli import main

if __name__ == "__main__":
    main()
