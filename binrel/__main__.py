from binrel.cli.app import main

main()
