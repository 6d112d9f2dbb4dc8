from gca_serverd.launcher import main


main()
