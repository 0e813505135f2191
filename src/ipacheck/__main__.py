from ipacheck.cli.main import main

main()
