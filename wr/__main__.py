from wr.cli.app import main

main()
