from create_react_prototype.cli import main

if __name__ == "__main__":
    main()
