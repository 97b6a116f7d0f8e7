from zi.cli.main import main

main()
