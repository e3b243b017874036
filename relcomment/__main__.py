from relcomment.cli.app import main

main()
