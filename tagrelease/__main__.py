from tagrelease.cli.app import main

main()
